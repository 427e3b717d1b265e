"""
S3 backend for the blob store gateway, built on boto3.

Works against AWS S3 and S3-compatible stores (MinIO, Ceph, ...) through
an endpoint override. Every botocore failure is raised as TransportError
with the original exception as cause.
"""

from typing import Any, BinaryIO, List, Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from artifact_store.common.exceptions import NotFoundError, NotFoundKind, TransportError
from artifact_store.gateway.base import CURSOR_START, ConfigMap

KIND = "s3"

CONFIG_ACCESS_KEY_ID = "access_key_id"
CONFIG_SECRET_KEY = "secret_key"
CONFIG_REGION = "region"
CONFIG_ENDPOINT = "endpoint"
CONFIG_DISABLE_SSL = "disable_ssl"
CONFIG_V2_SIGNING = "v2_signing"

_MISSING_KEY_CODES = ("404", "NoSuchKey", "NotFound")


def _flag(config: ConfigMap, name: str) -> bool:
    value, _ = config.config(name)
    return value.strip().lower() == "true"


def _endpoint_url(endpoint: str, disable_ssl: bool) -> Optional[str]:
    if not endpoint:
        return None
    if "://" in endpoint:
        return endpoint
    scheme = "http" if disable_ssl else "https"
    return f"{scheme}://{endpoint}"


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


def dial(config: ConfigMap) -> "S3Location":
    """
    Build an S3 location from gateway settings.

    Legacy signing maps to botocore's "s3" (SigV2) signer, otherwise "s3v4".
    """
    access_key_id, _ = config.config(CONFIG_ACCESS_KEY_ID)
    secret_key, _ = config.config(CONFIG_SECRET_KEY)
    region, _ = config.config(CONFIG_REGION)
    endpoint, _ = config.config(CONFIG_ENDPOINT)
    disable_ssl = _flag(config, CONFIG_DISABLE_SSL)
    v2_signing = _flag(config, CONFIG_V2_SIGNING)

    boto_config = BotoConfig(
        signature_version="s3" if v2_signing else "s3v4",
        retries={"max_attempts": 1, "mode": "standard"},
    )

    try:
        client = boto3.client(
            "s3",
            endpoint_url=_endpoint_url(endpoint, disable_ssl),
            aws_access_key_id=access_key_id or None,
            aws_secret_access_key=secret_key or None,
            region_name=region or None,
            use_ssl=not disable_ssl,
            config=boto_config,
        )
    except (BotoCoreError, ValueError) as e:
        raise TransportError(str(e), cause=e, context={"endpoint": endpoint})

    return S3Location(client)


class S3Item:
    """One object in a bucket. Size is fetched lazily unless known from a listing."""

    def __init__(self, client: Any, bucket: str, key: str, size: Optional[int] = None):
        self._client = client
        self._bucket = bucket
        self._key = key
        self._size = size

    @property
    def id(self) -> str:
        return self._key

    def size(self) -> int:
        if self._size is None:
            try:
                head = self._client.head_object(Bucket=self._bucket, Key=self._key)
            except ClientError as e:
                raise self._classify(e)
            except BotoCoreError as e:
                raise TransportError(str(e), cause=e, context=self._context())
            self._size = int(head.get("ContentLength") or 0)
        return self._size

    def open(self) -> BinaryIO:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=self._key)
        except ClientError as e:
            raise self._classify(e)
        except BotoCoreError as e:
            raise TransportError(str(e), cause=e, context=self._context())
        return response["Body"]

    def _context(self) -> dict:
        return {"bucket": self._bucket, "artifact": self._key}

    def _classify(self, exc: ClientError) -> Exception:
        if _error_code(exc) in _MISSING_KEY_CODES:
            return NotFoundError(
                f"object '{self._key}' not found in bucket '{self._bucket}'",
                kind=NotFoundKind.NO_SUCH_KEY,
                cause=exc,
                context=self._context(),
            )
        return TransportError(str(exc), cause=exc, context=self._context())


class S3Container:
    """A bucket reached through a boto3 client."""

    def __init__(self, client: Any, name: str):
        self._client = client
        self._name = name

    @property
    def id(self) -> str:
        return self._name

    def item(self, key: str) -> S3Item:
        return S3Item(self._client, self._name, key)

    def items(self, prefix: str, cursor: str, count: int) -> Tuple[List[S3Item], str]:
        params = {"Bucket": self._name, "Prefix": prefix, "MaxKeys": count}
        if cursor != CURSOR_START:
            params["ContinuationToken"] = cursor

        try:
            page = self._client.list_objects_v2(**params)
        except (BotoCoreError, ClientError) as e:
            raise TransportError(str(e), cause=e, context={"bucket": self._name})

        items = [
            S3Item(self._client, self._name, obj["Key"], int(obj.get("Size", 0)))
            for obj in page.get("Contents", [])
        ]
        next_cursor = CURSOR_START
        if page.get("IsTruncated"):
            next_cursor = page.get("NextContinuationToken") or CURSOR_START
        return items, next_cursor


class S3Location:
    """Connected S3 endpoint."""

    def __init__(self, client: Any):
        self._client = client

    def container(self, name: str) -> S3Container:
        """Resolve a bucket, failing if it can't be reached."""
        try:
            self._client.head_bucket(Bucket=name)
        except (BotoCoreError, ClientError) as e:
            raise TransportError(str(e), cause=e, context={"bucket": name})
        return S3Container(self._client, name)

    def close(self) -> None:
        self._client.close()
