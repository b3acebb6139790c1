from listings_web.db.models.listing import Listing
from listings_web.db.models.session_record import SessionRecord
from listings_web.db.models.user import User

__all__ = ["Listing", "SessionRecord", "User"]
