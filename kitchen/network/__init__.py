"""Network layer: request catalog, transport, decoding, errors and the API facade."""

from kitchen.network.api import KitchenAPI
from kitchen.network.catalog import (
    DeleteData,
    Endpoint,
    FetchDataDetail,
    FetchDataList,
    GetUserInfo,
    HttpMethod,
    Login,
    MultipartPart,
    Register,
    RequestDescriptor,
    UpdateUserInfo,
    UploadData,
    UploadFile,
    UploadImage,
    build_request,
)
from kitchen.network.completion import Result, Single, Subscription, run_with_callback
from kitchen.network.decoding import decode_empty, decode_response
from kitchen.network.errors import (
    DecodingError,
    EncodingError,
    ErrorReporter,
    ForbiddenError,
    InvalidURLError,
    NetworkError,
    NetworkUnavailableError,
    NoDataError,
    NotFoundError,
    RequestTimeoutError,
    ServerError,
    TransportError,
    UnauthorizedError,
    UnknownNetworkError,
    classify_http_status,
    classify_transport_failure,
)
from kitchen.network.notifications import (
    NETWORK_UNAVAILABLE,
    USER_NEEDS_REAUTH,
    NotificationCenter,
)
from kitchen.network.session import (
    AuthSession,
    InMemoryKeyValueStore,
    JsonFileStore,
    KeyValueStore,
)
from kitchen.network.transport import (
    ActivityObserver,
    HttpTransport,
    LoggingObserver,
    NetworkActivityIndicator,
)
from kitchen.network.stubs import sample_response, stub_transport

__all__ = [
    "NETWORK_UNAVAILABLE",
    "USER_NEEDS_REAUTH",
    "ActivityObserver",
    "AuthSession",
    "DecodingError",
    "DeleteData",
    "EncodingError",
    "Endpoint",
    "ErrorReporter",
    "FetchDataDetail",
    "FetchDataList",
    "ForbiddenError",
    "GetUserInfo",
    "HttpMethod",
    "HttpTransport",
    "InMemoryKeyValueStore",
    "InvalidURLError",
    "JsonFileStore",
    "KeyValueStore",
    "KitchenAPI",
    "LoggingObserver",
    "Login",
    "MultipartPart",
    "NetworkActivityIndicator",
    "NetworkError",
    "NetworkUnavailableError",
    "NoDataError",
    "NotFoundError",
    "NotificationCenter",
    "Register",
    "RequestDescriptor",
    "RequestTimeoutError",
    "Result",
    "ServerError",
    "Single",
    "Subscription",
    "TransportError",
    "UnauthorizedError",
    "UnknownNetworkError",
    "UpdateUserInfo",
    "UploadData",
    "UploadFile",
    "UploadImage",
    "build_request",
    "classify_http_status",
    "classify_transport_failure",
    "decode_empty",
    "decode_response",
    "run_with_callback",
    "sample_response",
    "stub_transport",
]
