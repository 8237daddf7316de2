from datetime import datetime, timedelta, timezone

import jwt
import pytest

from campus_connect.utils import credentials
from campus_connect.utils.settings import get_auth_settings


def test_hash_and_verify_password():
    encoded = credentials.hash_password("Secr3tPass")
    assert encoded != "Secr3tPass"
    assert encoded.startswith("$argon2")
    assert credentials.verify_password("Secr3tPass", encoded)
    assert not credentials.verify_password("wrong-pass", encoded)


def test_verify_password_rejects_garbage_hash():
    assert credentials.verify_password("anything", "not-a-hash") is False
    assert credentials.verify_password("", "not-a-hash") is False


@pytest.mark.parametrize(
    "password,ok",
    [
        ("Passw0rdOk", True),
        ("short1A", False),
        ("alllowercase1", False),
        ("ALLUPPERCASE1", False),
        ("NoDigitsHere", False),
    ],
)
def test_password_policy(password, ok):
    assert credentials.password_meets_policy(password) is ok


def test_access_token_carries_user_id():
    token = credentials.create_access_token(42)
    assert credentials.decode_access_token(token) == 42

    payload = jwt.decode(token, get_auth_settings().jwt_secret, algorithms=["HS256"])
    assert payload["userId"] == 42
    assert payload["exp"] > payload["iat"]


def test_expired_token_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(days=30)
    token = credentials.create_access_token(1, now=issued)
    with pytest.raises(credentials.TokenError) as exc:
        credentials.decode_access_token(token)
    assert exc.value.code == "token_expired"


def test_token_signed_with_other_secret_is_rejected():
    token = jwt.encode({"userId": 1}, "another-secret", algorithm="HS256")
    with pytest.raises(credentials.TokenError) as exc:
        credentials.decode_access_token(token)
    assert exc.value.code == "token_invalid"


@pytest.mark.parametrize("user_id", ["1", True, None, 1.5])
def test_token_with_non_integer_user_id_is_rejected(user_id):
    secret = get_auth_settings().jwt_secret
    token = jwt.encode({"userId": user_id}, secret, algorithm="HS256")
    with pytest.raises(credentials.TokenError):
        credentials.decode_access_token(token)
