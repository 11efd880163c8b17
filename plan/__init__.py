"""
Plan Module

Question catalog, answer store and flow sequencing for the three plan kinds.
"""

from .answer_store import AnswerStore
from .config import get_flow, get_plan_option, is_visible, resolve_bound
from .flow_resolver import FlowResolver, active_questions

__all__ = [
    'AnswerStore',
    'FlowResolver',
    'active_questions',
    'get_flow',
    'get_plan_option',
    'is_visible',
    'resolve_bound'
]
