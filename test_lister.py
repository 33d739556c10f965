"""Tests for listing backups in the bucket."""

from datetime import datetime, timezone

from botocore.exceptions import ClientError, EndpointConnectionError

from spaces_backup.lister import BackupLister, format_last_modified, render_listing
from spaces_backup.models import BackupListing
from conftest import FakeS3Client

T1 = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
T2 = datetime(2024, 1, 2, 10, 0, 0, tzinfo=timezone.utc)
T3 = datetime(2024, 1, 3, 10, 0, 0, tzinfo=timezone.utc)


def obj(key, last_modified, size=1024):
    return {'Key': key, 'Size': size, 'LastModified': last_modified}


def test_empty_prefix_reports_no_backups(store_config):
    client = FakeS3Client(pages=[{'KeyCount': 0}])

    report = BackupLister(client, store_config).list()

    assert report.success is True
    assert report.entries == []
    assert client.paginator.calls == [{'Bucket': 'my-bucket', 'Prefix': 'postgres-backups'}]


def test_entries_sorted_newest_first(store_config):
    client = FakeS3Client(pages=[{'Contents': [
        obj('postgres-backups/b2.sql', T2),
        obj('postgres-backups/b1.sql', T1),
        obj('postgres-backups/b3.sql', T3),
    ]}])

    report = BackupLister(client, store_config).list()

    assert len(report.entries) == 3
    assert [e.last_modified for e in report.entries] == [T3, T2, T1]
    assert [e.key for e in report.entries] == [
        'postgres-backups/b3.sql', 'postgres-backups/b2.sql', 'postgres-backups/b1.sql',
    ]


def test_all_pages_collected(store_config):
    client = FakeS3Client(pages=[
        {'Contents': [obj('p/a.sql', T1), obj('p/b.sql', T3)]},
        {'Contents': [obj('p/c.sql', T2)]},
    ])

    entries = BackupLister(client, store_config).fetch()

    assert [e.key for e in entries] == ['p/b.sql', 'p/c.sql', 'p/a.sql']


def test_store_error_reported_not_raised(store_config):
    error = ClientError({'Error': {'Code': 'AccessDenied', 'Message': 'Access Denied'}}, 'ListObjectsV2')
    client = FakeS3Client(list_error=error)

    report = BackupLister(client, store_config).list()

    assert report.success is False
    assert report.entries == []
    assert 'AccessDenied' in report.error


def test_transport_error_reported_not_raised(store_config):
    client = FakeS3Client(list_error=EndpointConnectionError(endpoint_url='https://nyc3.example'))
    report = BackupLister(client, store_config).list()
    assert report.success is False


def test_render_listing():
    entries = [
        BackupListing(key='postgres-backups/backup_2024-01-03_10-00-00.sql', size=1572864,
                      last_modified=datetime(2024, 1, 3, 10, 0, 0)),
        BackupListing(key='postgres-backups/backup_2024-01-02_10-00-00.sql', size=0,
                      last_modified=datetime(2024, 1, 2, 9, 30, 5)),
    ]

    assert render_listing(entries) == [
        '1. postgres-backups/backup_2024-01-03_10-00-00.sql (1.50 MB) - 2024-01-03 10:00:00',
        '2. postgres-backups/backup_2024-01-02_10-00-00.sql (0.00 MB) - 2024-01-02 09:30:05',
    ]


def test_aware_timestamps_rendered_in_local_time():
    expected = T1.astimezone().strftime('%Y-%m-%d %H:%M:%S')
    assert format_last_modified(T1) == expected
