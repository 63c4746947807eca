import os
from flask import current_app
import boto3
from botocore.client import Config
from botocore.exceptions import ClientError


class StorageError(Exception):
    pass


class StorageAccessDenied(StorageError):
    pass


class StorageObjectNotFound(StorageError):
    pass


def _check_owner(owner_id, key):
    # private bucket: the first path segment is the owner's id
    first = key.split('/', 1)[0] if key else ''
    if not key or first != str(owner_id) or '..' in key.split('/'):
        raise StorageAccessDenied(f"key {key!r} is outside the storage area of user {owner_id}")


def _bucket():
    return current_app.config.get('STORAGE_BUCKET', 'course-files')


def _local_path(key):
    d = os.path.join(current_app.config['LOCAL_STORAGE_DIR'], _bucket())
    os.makedirs(d, exist_ok=True)
    return os.path.join(d, *key.split('/'))


def _s3_client():
    # build boto3 client kwargs flexibly: endpoint_url may be empty in AWS-managed S3
    s3_kwargs = {}
    endpoint = current_app.config.get('S3_ENDPOINT')
    if endpoint:
        s3_kwargs['endpoint_url'] = endpoint
    region = current_app.config.get('S3_REGION')
    if region:
        s3_kwargs['region_name'] = region
    return boto3.client(
        's3',
        aws_access_key_id=current_app.config.get('S3_ACCESS_KEY'),
        aws_secret_access_key=current_app.config.get('S3_SECRET_KEY'),
        config=Config(signature_version='s3v4'),
        **s3_kwargs,
    )


def _backend():
    return current_app.config.get('STORAGE_BACKEND', 'local')


def upload_object(owner_id, key, data: bytes, content_type=None):
    _check_owner(owner_id, key)
    if _backend() == 's3':
        extra = {'ContentType': content_type} if content_type else {}
        try:
            # conditional write: an existing key is never overwritten
            _s3_client().put_object(Bucket=_bucket(), Key=key, Body=data, IfNoneMatch='*', **extra)
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code in ('PreconditionFailed', '412', 'ConditionalRequestConflict'):
                raise StorageError(f"object {key!r} already exists") from e
            raise StorageError(f"upload of {key!r} failed: {e}") from e
        return key

    path = _local_path(key)
    if os.path.exists(path):
        raise StorageError(f"object {key!r} already exists")
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, 'wb') as f:
        f.write(data)
    return key


def download_object(owner_id, key) -> bytes:
    _check_owner(owner_id, key)
    if _backend() == 's3':
        try:
            obj = _s3_client().get_object(Bucket=_bucket(), Key=key)
        except ClientError as e:
            code = e.response.get('Error', {}).get('Code')
            if code in ('NoSuchKey', '404'):
                raise StorageObjectNotFound(key) from e
            raise StorageError(f"download of {key!r} failed: {e}") from e
        return obj['Body'].read()

    path = _local_path(key)
    if not os.path.isfile(path):
        raise StorageObjectNotFound(key)
    with open(path, 'rb') as f:
        return f.read()


def remove_objects(owner_id, keys):
    """Remove every key; keys that are already gone are not an error."""
    keys = list(keys)
    for key in keys:
        _check_owner(owner_id, key)
    if not keys:
        return []

    if _backend() == 's3':
        try:
            resp = _s3_client().delete_objects(
                Bucket=_bucket(),
                Delete={'Objects': [{'Key': k} for k in keys], 'Quiet': True},
            )
        except ClientError as e:
            raise StorageError(f"remove of {keys!r} failed: {e}") from e
        # per-key failures come back in a 200 response
        errors = resp.get('Errors') or []
        if errors:
            failed = [f"{err.get('Key')} ({err.get('Code')})" for err in errors]
            raise StorageError(f"remove failed for {', '.join(failed)}")
        return keys

    for key in keys:
        path = _local_path(key)
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"remove of {key!r} failed: {e}") from e
    return keys
