from datetime import date, datetime
from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Any, Dict

from tourbook.constants import InquiryStatus
from tourbook.models.tour_package import Attraction, IncludedExcluded, ItineraryItem

# -------------------- Auth / OTP Schemas --------------------


class SendOtpIn(BaseModel):
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None


class VerifyOtpIn(BaseModel):
    phone: str
    otp: str
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class EmailSendOtpIn(BaseModel):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None


class EmailVerifyOtpIn(BaseModel):
    email: str
    otp: str
    name: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshIn(BaseModel):
    refresh_token: str


class UserOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    createdAt: Optional[datetime] = None


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class SendOtpOut(BaseModel):
    success: bool = True
    message: str
    email: Optional[str] = None
    debug: Optional[Dict[str, Any]] = None


class VerifyOtpOut(BaseModel):
    success: bool = True
    message: str
    user: UserOut
    isNewUser: bool
    token: Optional[Token] = None


class LoginOut(BaseModel):
    success: bool = True
    user: UserOut
    token: Token


# -------------------- Package Schemas --------------------


class TourPackageCreate(BaseModel):
    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    original_price: float = Field(..., ge=0)
    discount_price: float = Field(..., ge=0)
    message_description: str = ""
    duration: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    contact: str = ""
    description: str = Field(..., min_length=1)
    top_attractions: List[Attraction] = Field(default_factory=list)
    included_excluded: List[IncludedExcluded] = Field(default_factory=list)
    itinerary: List[ItineraryItem] = Field(default_factory=list)
    country: str = Field(..., min_length=1)


class TourPackageUpdate(BaseModel):
    name: Optional[str] = None
    image: Optional[str] = None
    original_price: Optional[float] = Field(None, ge=0)
    discount_price: Optional[float] = Field(None, ge=0)
    message_description: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    contact: Optional[str] = None
    description: Optional[str] = None
    top_attractions: Optional[List[Attraction]] = None
    included_excluded: Optional[List[IncludedExcluded]] = None
    itinerary: Optional[List[ItineraryItem]] = None
    country: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # omit a field to leave it unchanged
        if value is None:
            raise ValueError("may not be null")
        return value


class TourPackageOut(TourPackageCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# -------------------- Mail / Inquiry Schemas --------------------


class BookingConfirmationIn(BaseModel):
    customerEmail: str = Field(..., min_length=3)
    customerName: str = Field(..., min_length=1)
    tourName: str = Field(..., min_length=1)
    bookingDate: date
    bookingReference: str = Field(..., min_length=1)
    participants: int = Field(1, ge=1)


class InquiryIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    message: str = Field(..., min_length=1)
    package: Optional[str] = None


class InquiryStatusUpdate(BaseModel):
    status: InquiryStatus


class InquiryOut(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    package: Optional[str] = None
    status: InquiryStatus
    createdAt: datetime
