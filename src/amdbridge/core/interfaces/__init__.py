from .cache import ModuleCacheProtocol
from .logging import LoggerFactoryProtocol, LoggerLikeProtocol
from .templating import TemplateEngineProtocol
from .transform import FileTransformProtocol, SourceRewriterProtocol

__all__ = [
    'ModuleCacheProtocol',
    'LoggerFactoryProtocol',
    'LoggerLikeProtocol',
    'TemplateEngineProtocol',
    'FileTransformProtocol',
    'SourceRewriterProtocol',
]
