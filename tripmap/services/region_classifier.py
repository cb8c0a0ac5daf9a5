"""
Keyword heuristics over the raw prompt: is the trip outside mainland China,
and which province or city does it target?

Matching is plain substring containment, no tokenization. A foreign name
embedded in an unrelated word (e.g. "世界" in "世界之窗") still counts.
"""
import logging
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

INTERNATIONAL_KEYWORDS: List[str] = [
    # Countries
    '日本', '韩国', '泰国', '新加坡', '马来西亚', '印尼', '越南', '菲律宾', '缅甸', '柬埔寨', '老挝',
    '美国', '加拿大', '英国', '法国', '德国', '意大利', '西班牙', '荷兰', '瑞士', '奥地利', '俄罗斯',
    '澳大利亚', '新西兰', '印度', '巴基斯坦', '孟加拉', '斯里兰卡', '尼泊尔', '不丹', '马尔代夫',
    '土耳其', '伊朗', '伊拉克', '沙特', '阿联酋', '埃及', '摩洛哥', '南非', '肯尼亚', '坦桑尼亚',
    '巴西', '阿根廷', '智利', '秘鲁', '墨西哥', '古巴', '牙买加',

    # Cities
    '东京', '大阪', '京都', '横滨', '名古屋', '神户', '福冈', '札幌', '仙台', '广岛',
    '首尔', '釜山', '济州岛', '大邱', '仁川',
    '曼谷', '清迈', '普吉岛', '芭提雅', '华欣',
    '吉隆坡', '槟城', '兰卡威',
    '纽约', '洛杉矶', '拉斯维加斯', '旧金山', '芝加哥', '华盛顿', '波士顿', '迈阿密', '西雅图', '奥兰多',
    '伦敦', '巴黎', '罗马', '威尼斯', '佛罗伦萨', '巴塞罗那', '马德里', '阿姆斯特丹', '布鲁塞尔', '米兰',
    '柏林', '慕尼黑', '维也纳', '苏黎世', '莫斯科', '圣彼得堡', '布拉格', '布达佩斯',
    '悉尼', '墨尔本', '奥克兰', '布里斯班', '珀斯', '阿德莱德',
    '孟买', '新德里', '加尔各答', '班加罗尔', '金奈',
    '伊斯坦布尔', '安卡拉', '迪拜', '阿布扎比', '多哈', '科威特',
    '开罗', '亚历山大', '卡萨布兰卡', '马拉喀什',
    '里约热内卢', '圣保罗', '布宜诺斯艾利斯', '利马', '圣地亚哥',

    # Regions, states, islands
    '北海道', '本州', '四国', '九州', '冲绳',
    '加州', '纽约州', '佛州', '德州', '夏威夷',
    '巴厘岛', '爪哇岛', '苏门答腊',
    '西西里', '撒丁岛', '托斯卡纳',
    '巴伐利亚', '普罗旺斯', '安达卢西亚',
    '昆士兰', '新南威尔士', '维多利亚州',

    # Continents and generic international-travel terms
    '欧洲', '北美', '南美', '非洲', '大洋洲', '中东', '东南亚', '南亚', '北欧', '西欧', '东欧',
    '出国', '国外', '海外', '境外', '签证', '护照', '免签', '落地签',
    '游轮', '邮轮', '国际航班', '跨国', '环球', '世界', '全球',
]

# Colloquial multi-province names -> one representative province (table order matters)
REGION_ALIASES: Dict[str, str] = {
    '长三角': '江苏',
    '长江三角洲': '江苏',
    '珠三角': '广东',
    '珠江三角洲': '广东',
    '京津冀': '北京',
    '环渤海': '北京',
    '粤港澳': '广东',
    '大湾区': '广东',
    '东北': '辽宁',
    '西北': '陕西',
    '西南': '四川',
    '华北': '北京',
    '华东': '江苏',
    '华南': '广东',
    '华中': '湖北',
}

PROVINCES: List[str] = [
    '北京', '天津', '上海', '重庆', '河北', '山西', '辽宁', '吉林', '黑龙江',
    '江苏', '浙江', '安徽', '福建', '江西', '山东', '河南', '湖北', '湖南',
    '广东', '广西', '海南', '四川', '贵州', '云南', '西藏', '陕西', '甘肃',
    '青海', '宁夏', '新疆', '内蒙古', '台湾', '香港', '澳门',
]

CITIES: List[str] = [
    # Tier 1
    '深圳', '广州',
    # New tier 1
    '杭州', '南京', '苏州', '成都', '西安', '武汉', '长沙', '郑州', '无锡', '宁波',
    # Tier 2
    '济南', '青岛', '大连', '沈阳', '哈尔滨', '长春', '石家庄', '太原', '呼和浩特',
    '南昌', '合肥', '福州', '厦门', '南宁', '海口', '昆明', '贵阳', '拉萨', '兰州',
    '西宁', '银川', '乌鲁木齐', '温州', '佛山', '东莞', '泉州', '惠州', '嘉兴',
    '烟台', '珠海', '镇江', '盐城', '金华', '台州', '绍兴', '湖州', '常州',
    # Tourist destinations
    '桂林', '丽江', '大理', '三亚', '张家界', '九寨沟', '黄山', '泰山', '庐山',
    '峨眉山', '普陀山', '五台山', '华山', '衡山', '恒山', '嵩山', '武当山',
    '承德', '秦皇岛', '威海', '日照', '洛阳', '开封', '平遥', '凤凰', '阳朔',
]


class RegionClassifier:
    """Static lookup tables for domain and region detection"""

    def __init__(
        self,
        international_keywords: Optional[List[str]] = None,
        region_aliases: Optional[Dict[str, str]] = None,
        provinces: Optional[List[str]] = None,
        cities: Optional[List[str]] = None
    ):
        self.international_keywords = international_keywords if international_keywords is not None else INTERNATIONAL_KEYWORDS
        self.region_aliases = region_aliases if region_aliases is not None else REGION_ALIASES
        self.provinces = provinces if provinces is not None else PROVINCES
        self.cities = cities if cities is not None else CITIES
        self._international_lower = [k.lower() for k in self.international_keywords]

    def is_out_of_domain(self, prompt: str) -> bool:
        """True when the prompt mentions any foreign place or international-travel term."""
        lowered = (prompt or "").lower()
        for keyword, keyword_lower in zip(self.international_keywords, self._international_lower):
            if keyword_lower in lowered:
                logger.info(f"International keyword detected: {keyword}")
                return True
        return False

    def extract_region(self, prompt: str) -> Optional[str]:
        """
        Find the administrative region a prompt is about.

        Checks region aliases, then provinces, then cities; the first containment
        match in that order wins.
        """
        if not prompt:
            return None

        for alias, province in self.region_aliases.items():
            if alias in prompt:
                logger.debug(f"Region alias detected: {alias} -> {province}")
                return province

        for province in self.provinces:
            if province in prompt:
                return province

        for city in self.cities:
            if city in prompt:
                return city

        return None
