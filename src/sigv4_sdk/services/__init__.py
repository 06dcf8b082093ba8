"""
Service request builders

Each module builds signed requests for one service family: mail sending
(ses), firewall rules (waf), compute instances (ec2) and object storage (s3).
"""

from . import ses, waf, ec2, s3
from .common import ServiceRequest, build_https_url
from .s3 import MultipartUpload, MultipartUploadState, StorageClass

__all__ = [
    'ses',
    'waf',
    'ec2',
    's3',
    'ServiceRequest',
    'build_https_url',
    'MultipartUpload',
    'MultipartUploadState',
    'StorageClass',
]
