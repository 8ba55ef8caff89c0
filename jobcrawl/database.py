"""MySQL connection setup, with the password optionally fetched from AWS."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qsl

import pymysql
import requests

from jobcrawl.config import Config

logger = logging.getLogger(__name__)

_REGION = "ap-northeast-2"
_SERVICE = "secretsmanager"
_DEFAULT_PORT = 3306
_CREDENTIAL_SEPARATOR = ":"
_ALGORITHM = "AWS4-HMAC-SHA256"
_SIGNING_PREFIX = "AWS4"
_AWS_ENV_NAMES = ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_SESSION_TOKEN")
_RDS_ENV_VAR = "RDS_SECRET_NAME"
_RESPONSE_FIELD = "SecretString"


class SecretError(Exception):
    """The database password could not be obtained from the secret store."""


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Turn a ``user:pass@net(addr)/dbname?params`` DSN into connect arguments."""
    slash = dsn.rfind("/")
    if slash < 0:
        raise ValueError("invalid DSN: missing the slash before the database name")
    head, tail = dsn[:slash], dsn[slash + 1:]
    database, _, query = tail.partition("?")

    at = head.rfind("@")
    credentials, address = (head[:at], head[at + 1:]) if at >= 0 else ("", head)
    user, _, password = credentials.partition(_CREDENTIAL_SEPARATOR)

    network, addr = address, ""
    paren = address.find("(")
    if paren >= 0:
        if not address.endswith(")"):
            raise ValueError("invalid DSN: network address not terminated")
        network, addr = address[:paren], address[paren + 1:-1]
    network = network or "tcp"

    options: dict[str, Any] = {
        "user": user,
        "password": password,
        "database": database or None,
    }
    if network == "unix":
        options["unix_socket"] = addr or "/tmp/mysql.sock"
    elif network == "tcp":
        host, sep, port = (addr or f"127.0.0.1:{_DEFAULT_PORT}").rpartition(":")
        if not sep:
            host, port = port, ""
        options["host"] = host.strip("[]") or "127.0.0.1"
        try:
            options["port"] = int(port) if port else _DEFAULT_PORT
        except ValueError as exc:
            raise ValueError(f"invalid DSN: bad port {port!r}") from exc
    else:
        raise ValueError(f"invalid DSN: unsupported network {network!r}")

    params = dict(parse_qsl(query))
    if "charset" in params:
        options["charset"] = params["charset"].split(",")[0]
    return options


def extract_password(secret_json: str) -> str:
    """Return the ``password`` member of a JSON secret."""
    try:
        document = json.loads(secret_json)
    except json.JSONDecodeError as exc:
        raise SecretError(f"secret is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise SecretError("secret is not a JSON object")
    password = document.get("password")
    if not isinstance(password, str):
        raise SecretError("secret has no string 'password' member")
    return password


@dataclass(frozen=True)
class _Credentials:
    access_key: str
    secret_key: str
    session_token: str | None


def _credentials_from_env() -> _Credentials:
    access_key, secret_key, session_token = (os.environ.get(name) for name in _AWS_ENV_NAMES)
    if not access_key or not secret_key:
        raise SecretError("AWS credentials are not set in the environment")
    return _Credentials(access_key, secret_key, session_token or None)


def _hmac(key: bytes, message: str) -> bytes:
    return hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()


def _authorization_header(access_key: str, scope: str, signed_headers: str, signature: str) -> str:
    return (
        f"{_ALGORITHM} Credential={access_key}/{scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


def _sign(
    headers: dict[str, str],
    body: bytes,
    credentials: _Credentials,
    host: str,
    now: datetime,
) -> dict[str, str]:
    """Return the headers of a POST to ``/`` signed with AWS Signature V4."""
    amz_date = now.strftime("%Y%m%dT%H%M%SZ")
    date = now.strftime("%Y%m%d")
    signed = {**headers, "Host": host, "X-Amz-Date": amz_date}
    if credentials.session_token:
        signed["X-Amz-Security-Token"] = credentials.session_token

    canonical = {name.lower(): " ".join(value.split()) for name, value in signed.items()}
    names = sorted(canonical)
    signed_headers = ";".join(names)
    canonical_headers = "".join(f"{name}:{canonical[name]}\n" for name in names)
    canonical_request = "\n".join(
        ["POST", "/", "", canonical_headers, signed_headers, hashlib.sha256(body).hexdigest()]
    )
    scope = f"{date}/{_REGION}/{_SERVICE}/aws4_request"
    string_to_sign = "\n".join(
        [
            _ALGORITHM,
            amz_date,
            scope,
            hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
        ]
    )
    signing_key = _hmac((_SIGNING_PREFIX + credentials.secret_key).encode("utf-8"), date)
    for part in (_REGION, _SERVICE, "aws4_request"):
        signing_key = _hmac(signing_key, part)
    signature = hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()
    signed["Authorization"] = _authorization_header(
        credentials.access_key, scope, signed_headers, signature
    )
    return signed


def _fetch_secret(session: requests.Session, secret_name: str) -> str:
    credentials = _credentials_from_env()
    host = f"{_SERVICE}.{_REGION}.amazonaws.com"
    body = json.dumps({"SecretId": secret_name, "VersionStage": "AWSCURRENT"}).encode("utf-8")
    headers = _sign(
        {
            "Content-Type": "application/x-amz-json-1.1",
            "X-Amz-Target": "secretsmanager.GetSecretValue",
        },
        body,
        credentials,
        host,
        datetime.now(timezone.utc),
    )
    try:
        response = session.post(f"https://{host}/", data=body, headers=headers, timeout=30)
    except requests.RequestException as exc:
        raise SecretError(f"GetSecretValue request failed: {exc}") from exc
    if not response.ok:
        raise SecretError(f"GetSecretValue failed ({response.status_code}): {response.text}")
    try:
        secret_string = response.json().get(_RESPONSE_FIELD)
    except ValueError as exc:
        raise SecretError("GetSecretValue returned invalid JSON") from exc
    if not isinstance(secret_string, str):
        raise SecretError("secret has no SecretString")
    return secret_string


def get_rds_secret(session: requests.Session | None = None) -> str:
    """Fetch the database password named by ``RDS_SECRET_NAME`` from Secrets Manager."""
    secret_name = os.environ.get(_RDS_ENV_VAR)
    if not secret_name:
        raise SecretError("RDS_SECRET_NAME environment variable not set")
    if session is not None:
        return extract_password(_fetch_secret(session, secret_name))
    with requests.Session() as own_session:
        return extract_password(_fetch_secret(own_session, secret_name))


def initialize(cfg: Config) -> pymysql.connections.Connection:
    """Open and check a connection to the configured database."""
    dsn = cfg.db.url
    if os.environ.get("APP_ENV") == "aws_lambda":
        dsn = dsn.replace("<password>", get_rds_secret())
        logger.info("Loading cfg from %s", dsn)
    connection = pymysql.connect(**parse_dsn(dsn))
    connection.ping(reconnect=False)
    return connection