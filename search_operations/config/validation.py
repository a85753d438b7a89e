"""
Search Query Validation

This module defines Pydantic models for API-level parameter validation of
lexical, semantic and hybrid search requests.
"""

from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..core.search_ops_exceptions import InvalidSearchParametersError

Q = TypeVar('Q', bound=BaseModel)


class SearchQuery(BaseModel):
    """Lexical search request scoped to a tenant."""
    tenant_id: str = Field(..., min_length=1, description="Tenant whose documents are searched")
    q: str = Field(..., min_length=1, description="Query text")
    limit: int = Field(10, ge=1, le=50, description="Maximum number of results to return")
    offset: int = Field(0, ge=0, description="Number of results to skip for pagination")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator('q')
    @classmethod
    def validate_query_text(cls, v: str) -> str:
        """Reject whitespace-only queries"""
        if not v.strip():
            raise ValueError("Query cannot be empty")
        return v


class SemanticQuery(BaseModel):
    """Standalone semantic search request."""
    tenant_id: str = Field(..., min_length=1, description="Tenant whose chunks are searched")
    q: str = Field(..., min_length=1, description="Query text")
    k: int = Field(5, ge=1, le=50, description="Number of reranked hits to keep")
    recall_k: int = Field(5, ge=1, le=50, description="Number of nearest-neighbor candidates to rerank")

    model_config = ConfigDict(extra="forbid", frozen=True)


class HybridSearchQuery(SearchQuery):
    """Hybrid (lexical + semantic) search request."""
    semantic_k: Optional[int] = Field(None, ge=1, le=50,
                                      description="Number of semantic hits to fuse (defaults to cover the page)")
    semantic_recall: Optional[int] = Field(None, ge=1, le=50,
                                           description="Number of semantic candidates to rerank (defaults to 3x semantic_k)")
    rrf_k: Optional[int] = Field(None, ge=1, le=100,
                                 description="Reciprocal Rank Fusion constant; lower values favour top ranks (defaults to the configured default_rrf_k)")


def parse_query(model: Type[Q], params: Dict[str, Any]) -> Q:
    """
    Validate raw parameters into a query model.

    Args:
        model: Query model class
        params: Raw parameters

    Returns:
        Validated query

    Raises:
        InvalidSearchParametersError: If validation fails
    """
    try:
        return model(**params)
    except ValidationError as e:
        raise InvalidSearchParametersError(f"Invalid {model.__name__}: {e}") from e
