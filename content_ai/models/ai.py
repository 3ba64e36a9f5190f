from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional

RewriteAction = Literal["improve", "rephrase", "shorten", "expand", "grammar"]


class TitleRequest(BaseModel):
    content: str = Field(min_length=50, description="Post body, HTML allowed")


class TitleResponse(BaseModel):
    title: str


class ImproveContentRequest(BaseModel):
    content: str = Field(min_length=10, max_length=10000)
    action: RewriteAction
    title: Optional[str] = None


class ImproveContentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    improved_content: str = Field(alias="improvedContent")
    model: str
    action: RewriteAction


class SEORequest(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=50)
    description: Optional[str] = None
    keywords: Optional[List[str]] = None


class TitleSuggestion(BaseModel):
    current: str = ""
    suggested: str = ""
    score: int = 0
    feedback: List[str] = []


class DescriptionSuggestion(BaseModel):
    current: Optional[str] = None
    suggested: str = ""
    score: int = 0
    feedback: List[str] = []


class KeywordSuggestion(BaseModel):
    suggested: List[str] = []
    score: int = 0
    feedback: List[str] = []


class OverallScore(BaseModel):
    score: int = 0
    feedback: List[str] = []


class SEOSuggestions(BaseModel):
    title: TitleSuggestion
    description: DescriptionSuggestion
    keywords: KeywordSuggestion
    overall: OverallScore


class SEOResponse(BaseModel):
    suggestions: SEOSuggestions


class ExcerptRequest(BaseModel):
    title: str = ""
    content: str = ""


class ExcerptResponse(BaseModel):
    excerpt: str


class ErrorResponse(BaseModel):
    error: str
    retryable: Optional[bool] = None
