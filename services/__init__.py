from .reference_model_service import ReferenceModelService

__all__ = ['ReferenceModelService']
