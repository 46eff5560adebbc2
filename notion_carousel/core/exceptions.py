"""
Custom exceptions for Notion Carousel
"""


class NotionCarouselError(Exception):
    """Base exception for Notion Carousel"""
    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "GENERIC_ERROR"


class NotionAPIError(NotionCarouselError):
    """Notion API related errors"""
    def __init__(self, message: str, database_id: str = None, code: str = None):
        super().__init__(message, "NOTION_API_ERROR")
        self.database_id = database_id
        self.code = code


class InvalidResponseError(NotionCarouselError):
    """Notion returned something that is not a query result"""
    def __init__(self, message: str, payload: object = None):
        super().__init__(message, "INVALID_RESPONSE")
        self.payload = payload


class ConfigurationError(NotionCarouselError):
    """Configuration related errors"""
    def __init__(self, message: str, config_key: str = None):
        super().__init__(message, "CONFIGURATION_ERROR")
        self.config_key = config_key
