"""
Email-related Pydantic models
"""

from typing import Annotated, Literal, Optional, Union
from pydantic import BaseModel, Field, TypeAdapter
from enum import Enum

class EmailType(str, Enum):
    WELCOME = "welcome"
    NOTIFICATION = "notification"
    CUSTOM = "custom"

class WelcomeMailData(BaseModel):
    type: Literal["welcome"] = "welcome"
    name: str
    email: str
    age: int

class NotificationMailData(BaseModel):
    type: Literal["notification"] = "notification"
    message: str
    subject: Optional[str] = None

class CustomMailData(BaseModel):
    type: Literal["custom"] = "custom"
    message: str
    subject: Optional[str] = None

MailData = Annotated[
    Union[WelcomeMailData, NotificationMailData, CustomMailData],
    Field(discriminator="type")
]

mail_data_adapter: TypeAdapter = TypeAdapter(MailData)

class EmailTemplate(BaseModel):
    subject: str
    html: str
    text: str

class EmailResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    preview_url: Optional[str] = None
    error: Optional[str] = None
