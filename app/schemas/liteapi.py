from pydantic import BaseModel


class HotelImage(BaseModel):
    url: str | None = None
    urlHd: str | None = None
    caption: str | None = None
    order: int | None = None
    defaultImage: bool = False


class RoomPhoto(BaseModel):
    url: str | None = None
    hd_url: str | None = None
    imageDescription: str | None = None
    mainPhoto: bool = False


class Room(BaseModel):
    id: int | None = None
    roomName: str | None = None
    description: str | None = None
    photos: list[RoomPhoto] = []


class Facility(BaseModel):
    facilityId: int | None = None
    name: str | None = None


class Policy(BaseModel):
    policy_type: str | None = None
    name: str | None = None
    description: str | None = None


class SentimentCategory(BaseModel):
    name: str
    rating: float | None = None
    description: str | None = None


class SentimentAnalysis(BaseModel):
    pros: list[str] = []
    cons: list[str] = []
    categories: list[SentimentCategory] = []


class CheckinCheckoutTimes(BaseModel):
    checkin: str | None = None
    checkout: str | None = None
    checkinStart: str | None = None


class HotelDetail(BaseModel):
    id: str | None = None
    name: str | None = None
    hotelDescription: str | None = None
    hotelImportantInformation: str | None = None
    checkinCheckoutTimes: CheckinCheckoutTimes | None = None
    hotelImages: list[HotelImage] = []
    main_photo: str | None = None
    country: str | None = None
    city: str | None = None
    address: str | None = None
    starRating: float | None = None
    rating: float | None = None
    reviewCount: int | None = None
    hotelFacilities: list[str] = []
    facilities: list[Facility] = []
    rooms: list[Room] = []
    policies: list[Policy] = []
    sentiment_analysis: SentimentAnalysis | None = None


class HotelDetailResponse(BaseModel):
    data: HotelDetail | None = None
