"""로컬 키워드 기반 분류기.

Deterministic keyword rules used when no remote provider is configured or
when the remote provider fails. Never raises.
"""

from app.classification.base import ClassificationProvider
from app.models.error_report import SYSTEM_FACILITY, SYSTEM_SAFETY, SYSTEM_TICKETING

DEFAULT_TITLE = "시스템 오류 신고"
DEFAULT_CATEGORY = SYSTEM_FACILITY
MAX_TITLE_LENGTH = 50

# (제목 키워드, 매칭 단어) — 순서대로 최대 두 개 사용 (First two matches form the title)
TITLE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("로그인", ("로그인", "인증")),
    ("결제", ("결제", "카드")),
    ("예약", ("예약", "승차권")),
    ("화면", ("화면", "페이지")),
    ("오류", ("오류", "에러")),
    ("접속", ("접속", "연결")),
    ("시설", ("시설", "건물")),
    ("안전", ("안전", "보안")),
)

# 분류 키워드 — 역무지원 → 안전관리 → 시설물관리 순으로 검사 (Checked in order)
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (SYSTEM_TICKETING, ("승차권", "예약", "결제", "고객", "티켓", "발권", "환불", "변경")),
    (SYSTEM_SAFETY, ("안전", "보안", "위험", "사고", "응급", "화재", "대피", "경보")),
    (SYSTEM_FACILITY, ("시설", "건물", "설비", "엘리베이터", "에스컬레이터", "화장실", "조명", "공조", "전기")),
)

IMAGE_GUIDE_MESSAGE = """이미지 분석 결과:

분석 방법:
• 이미지의 텍스트나 오류 메시지를 확인해 주세요
• 화면 캡처의 경우 오류 코드나 메시지를 텍스트로 입력해 주세요
• 시설물 사진의 경우 문제 상황을 구체적으로 설명해 주세요

권장 사항:
• 오류 메시지가 있다면 정확히 복사해서 내용란에 추가 입력
• 시설물 손상 등은 위치, 손상 정도, 안전성 여부를 텍스트로 기술
• 시스템 화면 오류는 어떤 기능에서 발생했는지 명시

참고: 현재 이미지 직접 분석이 지원되지 않습니다. 이미지 내용을 텍스트로 설명해 주세요."""


def truncate_title(title: str) -> str:
    """50자를 넘으면 47자 + '...' (Clamp a title to 50 characters)."""
    if len(title) > MAX_TITLE_LENGTH:
        return title[: MAX_TITLE_LENGTH - 3] + "..."
    return title


def extract_keywords(content: str) -> list[str]:
    lowered = content.lower()
    return [label for label, words in TITLE_KEYWORDS if any(word in lowered for word in words)]


def title_from_keywords(content: str) -> str:
    """키워드로 제목을 조합합니다.

    Compose "<primary> [<secondary>] 문제" plus a symptom suffix, or the
    generic default title when nothing matches.
    """
    keywords = extract_keywords(content)
    if not keywords:
        return DEFAULT_TITLE

    title = " ".join(keywords[:2]) + " 문제"
    if "작동하지 않" in content or "안 됨" in content:
        title += " (동작 불가)"
    elif "느림" in content or "지연" in content:
        title += " (응답 지연)"
    elif "오류" in content or "에러" in content:
        title += " 발생"
    return truncate_title(title)


def category_from_keywords(content: str) -> str:
    lowered = content.lower()
    for category, words in CATEGORY_KEYWORDS:
        if any(word in lowered for word in words):
            return category
    return DEFAULT_CATEGORY


class KeywordProvider(ClassificationProvider):
    """키워드 매칭 기반 로컬 제공자 (Local keyword-matching provider)."""

    name = "keyword"

    async def suggest_title(self, content: str) -> str:
        return title_from_keywords(content)

    async def suggest_category(self, content: str) -> str:
        return category_from_keywords(content)

    async def analyze_image(self, image_bytes: bytes, content_type: str) -> str:
        return IMAGE_GUIDE_MESSAGE
