"""
Scenario Engine - Drives a chaos scenario and records its outcome

ScenarioDriver and ConsistencyVerifier live in .driver and .verifier and are
imported from there; they depend on the chaos engine, which in turn uses the
handlers exported here.
"""
from .error_handler import ErrorHandler, ErrorContext, ErrorCategory, ErrorSeverity
from .report_log import ReportLog
from .config_utils import ConfigLoader, ConfigValidator, save_config_as_yaml

__all__ = [
    'ErrorHandler',
    'ErrorContext',
    'ErrorCategory',
    'ErrorSeverity',
    'ReportLog',
    'ConfigLoader',
    'ConfigValidator',
    'save_config_as_yaml',
]
