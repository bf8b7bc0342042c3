from pydantic import BaseModel, ConfigDict, Field


# Base configuration: ORM objects in, camelCase aliases on the wire
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# Schema for user authentication credentials (format checks run in utils.validators)
class UserLogin(BaseModel):
    email: str
    password: str


# Schema for user registration requests
class UserCreate(ORMBase):
    username: str = Field(..., min_length=1)
    email: str
    password: str
    shop_name: str = Field(..., min_length=1, alias="shopName")


# Public projection of a user: never includes the password hash or refresh token
class UserResponse(ORMBase):
    id: int
    username: str
    email: str
    shop_name: str = Field(..., alias="shopName")


# Body returned by register, login and refresh
class AuthResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    message: str
