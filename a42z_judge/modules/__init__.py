# a42z Judge Gateway modules
# Version: 1.0

from .errors import (
    ConfigurationError,
    IllegalStateTransition,
    InvalidPayload,
    JudgeGatewayError,
    MissingField,
    NotFound,
    TransportError,
    UnknownJudge,
    UpstreamError,
)
from .judges import JudgeConfig, JudgeRegistry
from .schemas import (
    ANONYMOUS_USER,
    AnalysisRequest,
    AnalysisResult,
    RequestState,
)
from .settings import Settings
from .result_store import ResultEntry, ResultStore
from .dispatcher import ProxyDispatcher
from .adapters import JudgeGateway, JudgeRouteAdapter, generate_request_id
from .webhook import DifyWebhookEvent, WebhookInbox
