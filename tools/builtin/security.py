"""
Security Tools
--------------
hash, base64, token, plus encrypt/decrypt stubs (they need key management).
"""

from typing import Any, Dict, List
import base64
import binascii
import hashlib
import secrets

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import (
    bool_param,
    enum_param,
    integer_param,
    object_param,
    object_schema,
    string_param,
)

HASH_ALGORITHMS = ["md5", "sha1", "sha256", "sha512"]
CIPHERS = ["aes-256-gcm", "aes-256-cbc"]
MAX_TOKEN_LENGTH = 1024


def digest(data: str, algorithm: str = "sha256", encoding: str = "hex") -> str:
    hasher = hashlib.new(algorithm)
    hasher.update(data.encode("utf-8"))
    if encoding == "base64":
        return base64.b64encode(hasher.digest()).decode("ascii")
    return hasher.hexdigest()


def _exec_hash(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    data = args.get_str("data", allow_empty=True)
    algorithm = args.get_choice("algorithm", HASH_ALGORITHMS, "sha256")
    encoding = args.get_choice("encoding", ["hex", "base64"], "hex")

    return Result.ok_with_meta(
        digest(data, algorithm, encoding),
        {"algorithm": algorithm, "encoding": encoding},
    )


def _exec_base64(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["encode", "decode"])
    data = args.get_str("data", allow_empty=True)
    url_safe = args.get_bool("url", False)

    if action == "encode":
        encoder = base64.urlsafe_b64encode if url_safe else base64.b64encode
        return Result.ok(encoder(data.encode("utf-8")).decode("ascii"))

    decoder = base64.urlsafe_b64decode if url_safe else base64.b64decode
    try:
        decoded = decoder(data.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as e:
        return Result.from_error(f"invalid base64 data: {e}")
    return Result.ok(decoded.decode("utf-8", errors="replace"))


def _exec_token(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["generate", "validate"])
    token_type = args.get_choice("type", ["random", "jwt"], "random")

    if token_type == "jwt":
        return Result.stub(
            "JWT support requires a signing library and a configured secret"
        )
    if action != "generate":
        return Result.from_error("only 'generate' is supported for random tokens")

    length = args.get_int("length", 32)
    if not 0 < length <= MAX_TOKEN_LENGTH:
        return Result.from_error(f"length must be between 1 and {MAX_TOKEN_LENGTH}")

    token = secrets.token_hex((length + 1) // 2)[:length]
    return Result.ok_with_meta(token, {"type": token_type, "length": length})


def build_tools(settings: ToolSettings) -> List[Tool]:
    cipher_schema = {
        "data": string_param("Data to process"),
        "key": string_param("Encryption key"),
        "algorithm": enum_param("Algorithm", CIPHERS),
    }

    return [
        Tool(
            name="hash",
            description="Compute cryptographic hash of data",
            category=Category.SECURITY,
            parameters=object_schema({
                "data": string_param("Data to hash"),
                "algorithm": enum_param("Hash algorithm", HASH_ALGORITHMS, default="sha256"),
                "encoding": enum_param("Output encoding", ["hex", "base64"], default="hex"),
            }, required=["data"]),
            executor=_exec_hash,
        ),
        Tool(
            name="base64",
            description="Encode or decode base64 data",
            category=Category.SECURITY,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["encode", "decode"]),
                "data": string_param("Data to encode/decode"),
                "url": bool_param("Use URL-safe encoding", default=False),
            }, required=["action", "data"]),
            executor=_exec_base64,
        ),
        Tool(
            name="token",
            description="Generate random tokens (JWT support requires additional setup)",
            category=Category.SECURITY,
            parameters=object_schema({
                "action": enum_param("Action", ["generate", "validate"]),
                "type": enum_param("Token type", ["random", "jwt"], default="random"),
                "length": integer_param("Token length (for random)", minimum=1, maximum=MAX_TOKEN_LENGTH),
                "payload": object_param("JWT payload"),
                "secret": string_param("JWT secret (for signing)"),
            }, required=["action"]),
            executor=_exec_token,
        ),
        stub_tool(
            name="encrypt",
            description="Encrypt data using AES (requires encryption key setup)",
            category=Category.SECURITY,
            parameters=object_schema(cipher_schema, required=["data"]),
            message="Encryption requires key management to be configured",
        ),
        stub_tool(
            name="decrypt",
            description="Decrypt AES-encrypted data (requires encryption key setup)",
            category=Category.SECURITY,
            parameters=object_schema(cipher_schema, required=["data"]),
            message="Decryption requires key management to be configured",
        ),
    ]
