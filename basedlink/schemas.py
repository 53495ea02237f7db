from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional, Union


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())


# Generation Schemas
class GenerateRequest(_CamelModel):
    step: Optional[str] = None
    input: Optional[str] = None
    context: Optional[str] = None
    intent: Optional[str] = None
    length: Optional[str] = None
    model: Optional[str] = None
    tone: Optional[float] = None
    emoji_density: Optional[Union[float, str]] = Field(default=None, alias="emojiDensity")
    language: Optional[str] = None
    grant_message: Optional[str] = Field(default=None, alias="grantMessage")
    grant_signature: Optional[str] = Field(default=None, alias="grantSignature")
    wallet_address: Optional[str] = Field(default=None, alias="walletAddress")


class PolishRequest(_CamelModel):
    content: Optional[str] = None
    tone: Optional[float] = None
    emoji_density: Optional[Union[float, str]] = Field(default=None, alias="emojiDensity")


class AIResponse(BaseModel):
    result: Union[List[str], str]
    signature: Optional[str] = None


# Payment Schemas
class PaymentRequest(_CamelModel):
    """Signed EIP-712 payment authorisation; validity is checked on-chain."""

    user: Optional[str] = None
    tier: Optional[int] = None
    content_id: Optional[str] = Field(default=None, alias="contentId")
    nonce: Optional[int] = None
    deadline: Optional[int] = None
    signature: Optional[str] = None

    def missing_fields(self) -> List[str]:
        missing = []
        if not self.user:
            missing.append("user")
        if not self.tier:
            missing.append("tier")
        if not self.content_id:
            missing.append("contentId")
        if self.nonce is None:
            missing.append("nonce")
        if not self.deadline:
            missing.append("deadline")
        if not self.signature:
            missing.append("signature")
        return missing


class ExecutePaymentRequest(_CamelModel):
    user_address: Optional[str] = Field(default=None, alias="userAddress")
    tier: Optional[int] = None


class FaucetRequest(_CamelModel):
    user_address: Optional[str] = Field(default=None, alias="userAddress")
