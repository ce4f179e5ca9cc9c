from __future__ import annotations


class DigestParseError(ValueError):
    """Base class for everything that can go wrong turning digest text into sightings."""


class MalformedDigest(DigestParseError):
    """The sighting section could not be located; the whole message is rejected."""


class FieldExtractionError(DigestParseError):
    """A block is missing a sub-field or one of its markers."""


class NameDisambiguationError(DigestParseError):
    pass


class CoordinateParseError(DigestParseError):
    pass


class DateParseError(DigestParseError):
    pass
