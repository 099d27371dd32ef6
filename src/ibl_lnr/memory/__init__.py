"""Declarative memory used by the choice and retrieval models."""

from .chunks import Chunk
from .declarative import DeclarativeMemory, MemoryParameters, chunk_slot_values

__all__ = ["Chunk", "DeclarativeMemory", "MemoryParameters", "chunk_slot_values"]
