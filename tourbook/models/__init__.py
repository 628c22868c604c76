# Re-export Beanie documents
from .user import User
from .tour_package import TourPackage, Attraction, IncludedExcluded, ItineraryItem
from .inquiry import Inquiry
