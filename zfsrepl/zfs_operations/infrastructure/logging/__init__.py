from .structured_logger import StructuredLogger, StructuredFormatter, ContextLogger, OperationLogger

__all__ = ["StructuredLogger", "StructuredFormatter", "ContextLogger", "OperationLogger"]
