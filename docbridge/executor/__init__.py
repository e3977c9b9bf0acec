from docbridge.executor.dataset import DataSet, DocumentDataSet, InMemoryDataSet
from docbridge.executor.fallback import PostProcessingExecutor
from docbridge.executor.materializer import ResultMaterializer
from docbridge.executor.mutations import MutationContext, MutationResult, MutationScript

__all__ = [
    "DataSet",
    "DocumentDataSet",
    "InMemoryDataSet",
    "MutationContext",
    "MutationResult",
    "MutationScript",
    "PostProcessingExecutor",
    "ResultMaterializer",
]
