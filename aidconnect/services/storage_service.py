"""Photo uploads to S3."""
import uuid
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from werkzeug.utils import secure_filename

from aidconnect.errors import ExternalServiceFailure


class S3ImageStore:
    """Uploads request photos and returns their public URL."""

    def __init__(self, bucket_name: str, region: str,
                 access_key: Optional[str] = None, secret_key: Optional[str] = None):
        self.bucket_name = bucket_name
        self.region = region
        self.client = boto3.client(
            's3',
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region
        )

    @classmethod
    def from_config(cls, config):
        return cls(
            bucket_name=config.get('S3_BUCKET'),
            region=config.get('AWS_REGION'),
            access_key=config.get('AWS_ACCESS_KEY'),
            secret_key=config.get('AWS_SECRET_KEY'),
        )

    def object_name_for(self, filename: str) -> str:
        return f'{uuid.uuid4()}/{secure_filename(filename) or "upload"}'

    def get_file_url(self, object_name: str) -> str:
        return f'https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{object_name}'

    def upload(self, file) -> str:
        """Upload a werkzeug FileStorage and return its URL."""
        if not self.bucket_name:
            raise ExternalServiceFailure('Object storage is not configured')
        object_name = self.object_name_for(file.filename)
        extra_args = {}
        if file.mimetype:
            extra_args['ContentType'] = file.mimetype
        try:
            self.client.upload_fileobj(file.stream, self.bucket_name, object_name, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError) as e:
            current_app.logger.warning(f'Error uploading file {object_name}: {e}')
            raise ExternalServiceFailure('Error uploading file') from e
        current_app.logger.info(f'Uploaded file: {object_name}')
        return self.get_file_url(object_name)


def get_image_store():
    image_store = current_app.extensions.get('image_store')
    if image_store is None:
        image_store = S3ImageStore.from_config(current_app.config)
        current_app.extensions['image_store'] = image_store
    return image_store
