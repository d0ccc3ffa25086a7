"""Calendar UI logic, kept free of Streamlit so it can be tested directly."""

from src.ui.calendar_state import CalendarState, Phase
from src.ui.debounce import DebouncedTask

__all__ = ["CalendarState", "DebouncedTask", "Phase"]
