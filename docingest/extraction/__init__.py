from docingest.extraction.dispatcher import ExtractionDispatcher
from docingest.extraction.factory import ExtractionDispatcherFactory
from docingest.extraction.models import ExtractionResult

__all__ = ["ExtractionDispatcher", "ExtractionDispatcherFactory", "ExtractionResult"]
