from gamification.expressions.nodes import (
    AndExpressionNode,
    ConstantExpressionNode,
    ExpressionNode,
    NodeType,
    NotExpressionNode,
    OrExpressionNode,
)
from gamification.expressions.parser import Parser, parse_expression
from gamification.expressions.visitors import BindTask, IdCollector, MarkFinished

__all__ = [
    'AndExpressionNode',
    'BindTask',
    'ConstantExpressionNode',
    'ExpressionNode',
    'IdCollector',
    'MarkFinished',
    'NodeType',
    'NotExpressionNode',
    'OrExpressionNode',
    'Parser',
    'parse_expression',
]
