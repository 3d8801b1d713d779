"""Data preparation tools for gas databases."""

from .cross_section_generator import GasDatabaseGenerator, MODEL_GASES, create_model_database

__all__ = ['GasDatabaseGenerator', 'MODEL_GASES', 'create_model_database']
