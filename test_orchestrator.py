"""Tests for the backup pipeline: ordering, failure unwinding and cleanup."""

import subprocess
from datetime import datetime

import pytest

from spaces_backup.dump import DumpRunner
from spaces_backup.errors import DumpFailed, UploadFailed
from spaces_backup.models import ARTIFACT_PATTERN, UploadResult
from spaces_backup.orchestrator import BackupOrchestrator
from spaces_backup.uploader import ObjectStoreUploader
from conftest import FakeS3Client

FIXED_NOW = datetime(2024, 2, 29, 23, 15, 0)


class FakeDumpRunner:
    def __init__(self, content='-- PostgreSQL database dump\n', error=None):
        self.content = content
        self.error = error
        self.calls = []

    def dump(self, config, destination):
        self.calls.append((config, destination))
        if self.content is not None:
            destination.write_text(self.content)
        if self.error is not None:
            raise self.error


class FakeUploader:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def upload(self, local_path, descriptor):
        # The dump must be on disk when the upload starts
        assert local_path.exists()
        self.calls.append((local_path, descriptor))
        if self.error is not None:
            raise self.error
        return UploadResult(bucket='my-bucket', key=descriptor.key,
                            location=f'https://my-bucket.example/{descriptor.key}')


def make(db_config, store_config, tmp_path, dump_runner=None, uploader=None):
    return BackupOrchestrator(
        db_config, store_config,
        dump_runner or FakeDumpRunner(),
        uploader or FakeUploader(),
        tmp_path / 'work',
        now=lambda: FIXED_NOW
    )


def test_successful_run_uploads_and_cleans_up(db_config, store_config, tmp_path):
    dump_runner, uploader = FakeDumpRunner(), FakeUploader()
    orchestrator = make(db_config, store_config, tmp_path, dump_runner, uploader)

    result = orchestrator.run()

    local_path = tmp_path / 'work' / 'backup_2024-02-29_23-15-00.sql'
    assert dump_runner.calls == [(db_config, local_path)]
    assert len(uploader.calls) == 1
    uploaded_path, descriptor = uploader.calls[0]
    assert uploaded_path == local_path
    assert descriptor.key == 'postgres-backups/backup_2024-02-29_23-15-00.sql'
    assert descriptor.metadata['database-host'] == 'db.example.com'
    assert result.upload.key == descriptor.key
    assert result.attempt.artifact_name == 'backup_2024-02-29_23-15-00.sql'
    assert result.dump_size == len('-- PostgreSQL database dump\n')
    assert not local_path.exists()


def test_artifact_name_uses_current_time(db_config, store_config, tmp_path):
    orchestrator = BackupOrchestrator(db_config, store_config, FakeDumpRunner(),
                                      FakeUploader(), tmp_path)
    result = orchestrator.run()
    assert ARTIFACT_PATTERN.match(result.attempt.artifact_name)


def test_dump_failure_skips_upload_and_cleans_up(db_config, store_config, tmp_path):
    dump_runner = FakeDumpRunner(content='-- partial', error=DumpFailed('pg_dump failed', 'boom', 1))
    uploader = FakeUploader()
    orchestrator = make(db_config, store_config, tmp_path, dump_runner, uploader)

    with pytest.raises(DumpFailed):
        orchestrator.run()

    assert uploader.calls == []
    assert not orchestrator.last_attempt.local_path.exists()


def test_dump_failure_without_output_file(db_config, store_config, tmp_path):
    dump_runner = FakeDumpRunner(content=None, error=DumpFailed('Failed to start pg_dump'))
    orchestrator = make(db_config, store_config, tmp_path, dump_runner)

    with pytest.raises(DumpFailed):
        orchestrator.run()

    assert not orchestrator.last_attempt.local_path.exists()


def test_upload_failure_cleans_up(db_config, store_config, tmp_path):
    uploader = FakeUploader(error=UploadFailed('postgres-backups/x.sql', 'AccessDenied - Access Denied'))
    orchestrator = make(db_config, store_config, tmp_path, uploader=uploader)

    with pytest.raises(UploadFailed):
        orchestrator.run()

    assert len(uploader.calls) == 1
    assert not orchestrator.last_attempt.local_path.exists()


def test_one_dump_and_one_upload_per_run(db_config, store_config, tmp_path):
    dump_runner, uploader = FakeDumpRunner(), FakeUploader()
    make(db_config, store_config, tmp_path, dump_runner, uploader).run()
    assert len(dump_runner.calls) == 1
    assert len(uploader.calls) == 1


def test_killed_pg_dump_reports_stderr_and_removes_partial_file(db_config, store_config, tmp_path):
    def killed_run(cmd, **kwargs):
        out = cmd[cmd.index('-f') + 1]
        with open(out, 'w') as f:
            f.write('-- PostgreSQL database dump\nCREATE TABLE')
        return subprocess.CompletedProcess(cmd, 137, '', 'pg_dump: terminated by signal 9\n')

    client = FakeS3Client()
    orchestrator = BackupOrchestrator(
        db_config, store_config,
        DumpRunner(run=killed_run),
        ObjectStoreUploader(client, store_config),
        tmp_path,
        now=lambda: FIXED_NOW
    )

    with pytest.raises(DumpFailed) as exc_info:
        orchestrator.run()

    assert exc_info.value.returncode == 137
    assert 'terminated by signal 9' in exc_info.value.stderr
    assert client.uploads == []
    assert not (tmp_path / 'backup_2024-02-29_23-15-00.sql').exists()


def test_end_to_end_with_real_components(db_config, store_config, tmp_path):
    def ok_run(cmd, **kwargs):
        with open(cmd[cmd.index('-f') + 1], 'w') as f:
            f.write('-- dump\n')
        return subprocess.CompletedProcess(cmd, 0, '', 'pg_dump: dumping contents of table "public.t"\n')

    client = FakeS3Client()
    orchestrator = BackupOrchestrator(
        db_config, store_config,
        DumpRunner(run=ok_run),
        ObjectStoreUploader(client, store_config),
        tmp_path / 'nested' / 'work',
        now=lambda: FIXED_NOW
    )

    result = orchestrator.run()

    assert client.uploads[0]['body'] == b'-- dump\n'
    assert result.upload.location.endswith('/postgres-backups/backup_2024-02-29_23-15-00.sql')
    assert not orchestrator.last_attempt.local_path.exists()


def test_cleanup_is_idempotent(db_config, store_config, tmp_path):
    orchestrator = make(db_config, store_config, tmp_path)
    orchestrator.run()
    attempt = orchestrator.last_attempt

    assert orchestrator.cleanup(attempt) is False
