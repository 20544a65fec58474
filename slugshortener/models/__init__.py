from slugshortener.models.url_record_model import PageMetadata, URLRecordModel, RateLimitInfo


__all__ = [
    'PageMetadata',
    'URLRecordModel',
    'RateLimitInfo',
]
