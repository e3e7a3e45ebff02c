"""Tests for the S3 storage backend against a stubbed boto3 client."""
import io
import json

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from app.routevault.models import Location, StoreDocument
from app.routevault.storage import S3Storage
from app.routevault.store import DocumentStore

BUCKET = "routes"


@pytest.fixture()
def s3_client():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )
    with Stubber(client) as stub:
        yield client, stub
        stub.assert_no_pending_responses()


@pytest.fixture()
def storage(s3_client):
    client, _ = s3_client
    return S3Storage(
        endpoint="",
        region="us-east-1",
        bucket=BUCKET,
        access_key_id="test",
        secret_access_key="test",
        client=client,
    )


def _body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


def test_put_bytes_sends_content_type(storage, s3_client):
    _, stub = s3_client
    stub.add_response(
        "put_object",
        {},
        {"Bucket": BUCKET, "Key": "data.json", "Body": b'{"users": []}', "ContentType": "application/json"},
    )
    storage.put_bytes("data.json", b'{"users": []}', content_type="application/json")


def test_open_returns_object_body(storage, s3_client):
    _, stub = s3_client
    stub.add_response("get_object", {"Body": _body(b"hello")}, {"Bucket": BUCKET, "Key": "data.json"})
    assert storage.open("data.json").read() == b"hello"


def test_open_missing_key_raises_file_not_found(storage, s3_client):
    _, stub = s3_client
    stub.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    with pytest.raises(FileNotFoundError):
        storage.open("data.json")


def test_exists(storage, s3_client):
    _, stub = s3_client
    stub.add_response("head_object", {}, {"Bucket": BUCKET, "Key": "data.json"})
    stub.add_client_error("head_object", service_error_code="404", http_status_code=404)
    assert storage.exists("data.json") is True
    assert storage.exists("data.json") is False


def test_exists_propagates_other_errors(storage, s3_client):
    _, stub = s3_client
    stub.add_client_error("head_object", service_error_code="403", http_status_code=403)
    with pytest.raises(ClientError):
        storage.exists("data.json")


def test_document_store_over_s3(storage, s3_client):
    _, stub = s3_client
    store = DocumentStore(storage, key="data.json")

    # missing object: empty document, and a forbidden check never reports "absent"
    stub.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    assert store.read() == StoreDocument()
    stub.add_client_error("head_object", service_error_code="403", http_status_code=403)
    assert store.exists() is True

    doc = StoreDocument()
    doc.approved_data.locations.append(Location(id=1, name="North Gate"))
    payload = json.dumps(doc.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
    stub.add_response(
        "put_object",
        {},
        {"Bucket": BUCKET, "Key": "data.json", "Body": ANY, "ContentType": "application/json"},
    )
    assert store.write(doc) is True

    stub.add_response("get_object", {"Body": _body(payload)}, {"Bucket": BUCKET, "Key": "data.json"})
    assert store.read() == doc
