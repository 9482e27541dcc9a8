from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FieldMapping(BaseModel):
    """
    Declares that the value found at input_key (a dot separated path into the input data) should be written to
    pipedrive_key on the Pipedrive person.
    """

    pipedrive_key: str = Field(alias='pipedriveKey', min_length=1)
    input_key: str = Field(alias='inputKey', min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class ContactInfo(BaseModel):
    """One entry of a Pipedrive person's email or phone list"""

    label: str = 'work'
    value: str
    primary: bool = True


class Person(BaseModel):
    """Pipedrive Person as returned by the API, any fields other than id and name are kept as extras"""

    id: Optional[int] = None
    name: Optional[str] = None

    model_config = ConfigDict(extra='allow')


class PersonSearchItem(BaseModel):
    item: Person
    result_score: Optional[float] = None


class PersonSearchResult(BaseModel):
    items: Optional[list[PersonSearchItem]] = None
