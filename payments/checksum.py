"""Paytm checksum signing and verification.

A checksum is ``base64(AES-CBC(sha256(message + "|" + salt).hex + salt))``
keyed with the merchant key and Paytm's fixed IV.  The salt is four random
characters and rides along inside the encrypted hash, so verification
decrypts, peels the salt off the end and recomputes.
"""

import base64
import hashlib
import hmac
import json
import secrets
import string

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

IV = b"@@@@&&&&####$$$$"
SALT_CHARS = string.ascii_letters + string.digits
CHECKSUM_FIELD = "CHECKSUMHASH"


def _salt(length=4) -> str:
    return "".join(secrets.choice(SALT_CHARS) for _ in range(length))


def _hash(message: str, salt: str) -> str:
    return hashlib.sha256(f"{message}|{salt}".encode("utf-8")).hexdigest() + salt


def _encrypt(plain: str, key: str) -> str:
    cipher = AES.new(key.encode("utf-8"), AES.MODE_CBC, iv=IV)
    enc = cipher.encrypt(pad(plain.encode("utf-8"), AES.block_size))
    return base64.b64encode(enc).decode()


def _decrypt(cipher_text: str, key: str) -> str:
    cipher = AES.new(key.encode("utf-8"), AES.MODE_CBC, iv=IV)
    data = base64.b64decode(cipher_text, validate=True)
    return unpad(cipher.decrypt(data), AES.block_size).decode("utf-8")


def generate_signature(message: str, key: str) -> str:
    return _encrypt(_hash(message, _salt()), key)


def verify_signature(message: str, key: str, checksum: str) -> bool:
    if not checksum:
        return False
    try:
        decrypted = _decrypt(checksum.strip(), key)
    except ValueError:
        # bad base64, wrong block size or padding: not a checksum we issued
        return False
    if len(decrypted) < 4:
        return False
    expected = _hash(message, decrypted[-4:])
    return hmac.compare_digest(expected.encode("utf-8"), decrypted.encode("utf-8"))


def canonicalize(fields: dict) -> str:
    """Deterministic encoding of the signed fields; key order never matters."""
    signed = {k: v for k, v in fields.items() if k.upper() != CHECKSUM_FIELD}
    return json.dumps(signed, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def sign(fields: dict, key: str) -> str:
    return generate_signature(canonicalize(fields), key)


def verify(fields: dict, key: str, checksum: str) -> bool:
    return verify_signature(canonicalize(fields), key, checksum)
