"""비밀번호 해싱 유틸리티 — 로컬 계정 로그인/회원가입용.

Password hashing for local-credential accounts. AuthService hashes on
register and on the default admin bootstrap, and verifies on login.
"""

import bcrypt


def hash_password(password: str) -> str:
    """평문 비밀번호를 bcrypt 해시(salt 포함)로 변환합니다.

    Returns the ~60 char bcrypt string stored in `users.password_hash`.
    """
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """로그인 비밀번호 검증. 해시가 없는 계정(외부 인증 사용자)은 항상 실패.

    Accounts created through upsert without a password never match.
    """
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
