from passlib.context import CryptContext

# pbkdf2_sha256: salted, iterated, pure-python backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# login()에서 존재하지 않는 이메일일 때도 같은 비용의 검증을 수행하기 위한 해시
_DUMMY_HASH = pwd_context.hash("taskboard-dummy-password")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Returns False for a missing hash after spending the same verify cost."""
    if not hashed_password:
        pwd_context.verify(plain_password, _DUMMY_HASH)
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # unknown/corrupt hash format
        return False
