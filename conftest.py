"""Shared fixtures: isolated environment, configs and fake store clients."""

import logging

import pytest

from config import OPTIONAL_VARS, REQUIRED_VARS, DatabaseConfig, ObjectStoreConfig

BACKUP_ENV = {
    'DB_HOST': 'db.example.com',
    'DB_NAME': 'appdb',
    'DB_USER': 'backup',
    'DB_PASSWORD': 's3cret',
    'SPACES_ACCESS_KEY_ID': 'AKIAEXAMPLE',
    'SPACES_SECRET_ACCESS_KEY': 'secret-key',
    'SPACES_BUCKET_NAME': 'my-bucket',
}


@pytest.fixture(autouse=True)
def restore_root_logging():
    """CLI runs replace the root handlers; put them back after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def no_libpq_sslmode(monkeypatch):
    monkeypatch.delenv('PGSSLMODE', raising=False)


@pytest.fixture
def clean_env(monkeypatch):
    for name in list(REQUIRED_VARS) + list(OPTIONAL_VARS):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def backup_env(clean_env, tmp_path):
    for name, value in BACKUP_ENV.items():
        clean_env.setenv(name, value)
    clean_env.setenv('BACKUP_TEMP_DIR', str(tmp_path / 'work'))
    return dict(BACKUP_ENV)


@pytest.fixture
def db_config():
    return DatabaseConfig(host='db.example.com', port=5432, name='appdb',
                          user='backup', password='s3cret')


@pytest.fixture
def store_config():
    return ObjectStoreConfig(bucket='my-bucket', access_key_id='AKIAEXAMPLE',
                             secret_access_key='secret-key')


class FakePaginator:
    def __init__(self, pages, error=None):
        self.pages = pages
        self.error = error
        self.calls = []

    def paginate(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return iter(self.pages)


class FakeS3Client:
    """Stands in for a boto3 S3 client.

    ``upload_errors`` are raised by successive upload_fileobj calls; once
    exhausted, uploads succeed.
    """

    def __init__(self, pages=None, list_error=None, upload_errors=None):
        self.paginator = FakePaginator(pages or [{}], list_error)
        self.upload_errors = list(upload_errors or [])
        self.uploads = []

    def get_paginator(self, name):
        assert name == 'list_objects_v2'
        return self.paginator

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None, Callback=None):
        if self.upload_errors:
            raise self.upload_errors.pop(0)
        body = b''
        while True:
            chunk = fileobj.read(4)
            if not chunk:
                break
            body += chunk
            if Callback:
                Callback(len(chunk))
        self.uploads.append({
            'bucket': bucket,
            'key': key,
            'body': body,
            'extra_args': ExtraArgs,
            'fileobj': fileobj,
        })


@pytest.fixture
def fake_s3():
    return FakeS3Client()
