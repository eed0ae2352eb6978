"""
S3 Singleton module for managing S3 connections using boto3.

This module provides a singleton class for accessing S3 storage,
ensuring only one connection is created per set of credentials.
"""

from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.client import Config

from branchdeploy.core.constants import DEFAULT_REGION, MAX_POOL_CONNECTIONS
from branchdeploy.core.models import Credentials


class S3Singleton:
    """
    Singleton class for S3 access using boto3.

    The first instantiation must pass the credentials of the deployment
    target; later calls without arguments return the same client. Passing
    different credentials or a different region replaces the client.
    """

    _instance: Optional['S3Singleton'] = None
    _s3_client = None
    _connection: Optional[Tuple[Credentials, str]] = None
    # Default transfer configuration for all uploads
    _transfer_config = TransferConfig(
        multipart_threshold=8 * 1024 * 1024,  # 8MB
        max_concurrency=MAX_POOL_CONNECTIONS,
        multipart_chunksize=8 * 1024 * 1024,
        use_threads=True,
    )

    def __new__(cls, credentials: Optional[Credentials] = None,
                region: str = DEFAULT_REGION,
                max_pool_connections: int = MAX_POOL_CONNECTIONS) -> 'S3Singleton':
        """
        Return the shared instance, creating the boto3 client when needed.

        Args:
            credentials (Credentials, optional): Access and secret key of the target
            region (str): AWS region of the bucket
            max_pool_connections (int): Size of the HTTP connection pool

        Returns:
            S3Singleton: The singleton instance

        Raises:
            RuntimeError: If no credentials were ever given
        """
        if credentials is None:
            if cls._instance is None:
                raise RuntimeError("S3Singleton must be created with credentials first")
            return cls._instance

        connection = (credentials, region)
        if cls._instance is None or cls._instance._connection != connection:
            instance = super(S3Singleton, cls).__new__(cls)
            instance._s3_client = boto3.client(
                's3',
                region_name=region,
                aws_access_key_id=credentials.access_key,
                aws_secret_access_key=credentials.secret_key,
                config=Config(
                    signature_version='s3v4',
                    max_pool_connections=max_pool_connections,
                ),
            )
            instance._connection = connection
            cls._instance = instance
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the shared instance."""
        cls._instance = None

    @property
    def client(self):
        """
        Get the boto3 S3 client instance.

        Returns:
            boto3.client.S3: The boto3 S3 client instance
        """
        return self._s3_client

    def upload_file(self, local_path: Union[str, Path], bucket: str, key: str,
                    extra_args: Optional[Dict[str, str]] = None,
                    callback: Callable[[int], None] = None) -> None:
        """
        Upload a file to S3 using boto3.

        Args:
            local_path (Union[str, Path]): Path to the local file
            bucket (str): Destination bucket
            key (str): Destination object key
            extra_args (Dict[str, str], optional): putObject parameters such as
                                                   ContentType or CacheControl
            callback (callable, optional): Function to call with progress updates
                                          Should accept (bytes_transferred)
        """
        self._s3_client.upload_file(
            str(local_path),
            bucket,
            key,
            ExtraArgs=extra_args or None,
            Callback=callback,
            Config=self._transfer_config,
        )
