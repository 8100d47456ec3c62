"""Pet species, breeds and birth date pickers"""
from django.utils import timezone

SPECIES_CHOICES = [
    ('dog', '강아지'),
    ('cat', '고양이'),
    ('bird', '새'),
    ('fish', '물고기'),
    ('hamster', '햄스터'),
    ('rabbit', '토끼'),
    ('other', '기타'),
]

PET_BREEDS = {
    'dog': [
        "말티즈", "푸들", "비숑 프리제", "포메라니안", "치와와", "시츄", "요크셔 테리어",
        "골든 리트리버", "래브라도 리트리버", "시바 이누", "웰시 코기", "비글", "불독",
        "프렌치 불독", "보더 콜리", "진돗개", "삽살개", "믹스견", "기타",
    ],
    'cat': [
        "코리안 숏헤어", "페르시안", "러시안 블루", "브리티시 숏헤어", "샴", "메인쿤",
        "스코티시 폴드", "랙돌", "아메리칸 숏헤어", "노르웨이 숲", "벵갈", "아비시니안",
        "터키시 앙고라", "먼치킨", "스핑크스", "믹스묘", "기타",
    ],
    'bird': [
        "앵무새", "잉꼬", "카나리아", "문조", "사랑앵무", "왕관앵무", "모란앵무",
        "십자매", "금화조", "기타",
    ],
    'fish': [
        "금붕어", "베타", "구피", "네온 테트라", "엔젤피시", "디스커스", "플레코",
        "아로와나", "코리도라스", "기타",
    ],
    'hamster': [
        "골든 햄스터", "드워프 햄스터", "캠벨 드워프", "로보로브스키", "펄 햄스터",
        "윈터화이트", "기타",
    ],
    'rabbit': [
        "네덜란드 드워프", "롭이어", "미니렉스", "라이온헤드", "앙고라", "렉스", "기타",
    ],
    'other': ["기타"],
}

FIRST_BIRTH_YEAR = 2000


def birth_years():
    """Years offered for the birth date picker, newest first"""
    current_year = timezone.localdate().year
    return [str(year) for year in range(current_year, FIRST_BIRTH_YEAR - 1, -1)]


def birth_months():
    return [{'value': f"{month:02d}", 'label': f"{month}월"} for month in range(1, 13)]


def compose_birth_date(year, month, day=None):
    """
    Build a ``YYYY-MM-DD`` string from picker values.

    Returns None unless both year and month are given. A missing day becomes 01.
    """
    if not year or not month:
        return None
    day = day or '01'
    return f"{int(year):04d}-{int(month):02d}-{int(day):02d}"
