"""
DigitalOcean Spaces Integration

Resolves stored PDFs to their public URLs and downloads them, and handles
uploading and deleting documents.
"""

import logging

import boto3
import requests
import urllib3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from config import (
    DO_SPACES_BUCKET,
    DO_SPACES_ENDPOINT,
    DO_SPACES_KEY,
    DO_SPACES_REGION,
    DO_SPACES_SECRET,
    FETCH_TIMEOUT,
    SPACES_VERIFY_SSL,
)
from .errors import StorageConfigError, StorageNotFoundError

if not SPACES_VERIFY_SSL:
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

logger = logging.getLogger(__name__)


def is_configured() -> bool:
    return all([DO_SPACES_KEY, DO_SPACES_SECRET, DO_SPACES_BUCKET])


def get_spaces_client():
    """
    Create and return a boto3 client for DigitalOcean Spaces.

    Returns:
        boto3 client configured for DO Spaces
    """
    if not is_configured():
        raise StorageConfigError('DigitalOcean Spaces not configured. Missing environment variables.')

    return boto3.client(
        's3',
        region_name=DO_SPACES_REGION,
        endpoint_url=DO_SPACES_ENDPOINT,
        aws_access_key_id=DO_SPACES_KEY,
        aws_secret_access_key=DO_SPACES_SECRET,
        config=Config(signature_version='s3v4'),
        verify=SPACES_VERIFY_SSL,
    )


def public_url(key: str) -> str:
    # Format: https://{bucket}.{region}.digitaloceanspaces.com/{key}
    return f"https://{DO_SPACES_BUCKET}.{DO_SPACES_REGION}.digitaloceanspaces.com/{key}"


def head_document(key: str) -> str:
    """
    Look up a stored object and return its public URL.

    Raises:
        StorageNotFoundError: the object does not exist or cannot be reached
    """
    client = get_spaces_client()
    try:
        client.head_object(Bucket=DO_SPACES_BUCKET, Key=key)
    except (ClientError, BotoCoreError) as e:
        logger.warning("[do_spaces] Object lookup failed for %s: %s", key, e)
        raise StorageNotFoundError(f"File not found: {key}") from e
    return public_url(key)


def fetch_document(url: str) -> bytes:
    """
    Download an object by URL.

    Raises:
        StorageNotFoundError: the download failed or returned a non-2xx status
    """
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT, verify=SPACES_VERIFY_SSL)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("[do_spaces] Failed to fetch %s: %s", url, e)
        raise StorageNotFoundError(f"Failed to fetch PDF from storage: {e}") from e

    logger.info("[do_spaces] Fetched %s (%.2f KB)", url, len(response.content) / 1024)
    return response.content


def upload_to_spaces(data: bytes, destination_path: str, content_type: str = 'application/pdf') -> dict:
    """
    Upload bytes to DigitalOcean Spaces under the given key.

    Args:
        data: File content
        destination_path: Path/key in the bucket
        content_type: MIME type of the file (default: application/pdf)

    Returns:
        Dictionary with status, public_url, and message
    """
    if not is_configured():
        logger.error("[do_spaces] Missing DO Spaces configuration")
        return {
            'status': 'error',
            'message': 'DigitalOcean Spaces not configured. Missing environment variables.',
            'public_url': None
        }

    try:
        logger.info("[do_spaces] Uploading %d bytes to DO Spaces: %s", len(data), destination_path)

        client = get_spaces_client()
        client.put_object(
            Bucket=DO_SPACES_BUCKET,
            Key=destination_path,
            Body=data,
            ACL='public-read',
            ContentType=content_type
        )

        url = public_url(destination_path)
        logger.info("[do_spaces] File uploaded successfully. Public URL: %s", url)

        return {
            'status': 'success',
            'message': 'File uploaded successfully',
            'public_url': url
        }

    except (ClientError, BotoCoreError) as e:
        logger.error("[do_spaces] Failed to upload file: %s", str(e))
        return {
            'status': 'error',
            'message': f'Failed to upload to DO Spaces: {str(e)}',
            'public_url': None
        }


def delete_from_spaces(file_key: str) -> dict:
    """
    Delete a file from DigitalOcean Spaces.

    Args:
        file_key: The key/path of the file in the bucket

    Returns:
        Dictionary with status and message
    """
    if not is_configured():
        return {
            'status': 'error',
            'message': 'DigitalOcean Spaces not configured'
        }

    try:
        client = get_spaces_client()
        client.delete_object(Bucket=DO_SPACES_BUCKET, Key=file_key)

        logger.info("[do_spaces] File deleted: %s", file_key)

        return {
            'status': 'success',
            'message': 'File deleted successfully'
        }

    except (ClientError, BotoCoreError) as e:
        logger.error("[do_spaces] Failed to delete file: %s", str(e))
        return {
            'status': 'error',
            'message': f'Failed to delete from DO Spaces: {str(e)}'
        }
