"""
密码哈希测试
"""
from banyan.core.security import get_password_hash, verify_password


def test_hash_is_salted_and_not_plaintext():
    first = get_password_hash("secret1")
    second = get_password_hash("secret1")

    assert first != "secret1"
    assert first.startswith("$2")
    # 每次加盐结果不同
    assert first != second


def test_verify_matches_only_correct_password():
    hashed = get_password_hash("secret1")

    assert verify_password("secret1", hashed) is True
    assert verify_password("secret2", hashed) is False
    assert verify_password("", hashed) is False


def test_verify_malformed_hash_returns_false():
    assert verify_password("secret1", "not-a-bcrypt-hash") is False
    assert verify_password("secret1", "") is False
