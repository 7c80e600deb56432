"""
Streamlit integration wrapper for the Bento client.

The wrapper class extends the base client with Streamlit-specific
UI notifications while requests are being retried.
"""

import streamlit as st

from .client import BentoClient


class StreamlitBentoClient(BentoClient):
    """Bento client with Streamlit UI integration.

    Extends BentoClient to show st.warning() messages for rate limits,
    timeouts and network errors.
    """

    def _notify_rate_limit(self, wait_time: float, attempt: int, max_attempts: int):
        """Show Streamlit warning about rate limit."""
        st.warning(f"⏳ Bento Rate Limit erreicht. Retry in {wait_time:.1f}s... (Versuch {attempt}/{max_attempts})")

    def _notify_timeout(self, wait_time: float, attempt: int, max_attempts: int):
        """Show Streamlit warning about timeout."""
        st.warning(f"⏳ Bento Timeout. Retry in {wait_time:.1f}s... (Versuch {attempt}/{max_attempts})")

    def _notify_error(self, error: str, wait_time: float, attempt: int, max_attempts: int):
        """Show Streamlit warning about request error."""
        st.warning(f"⏳ Bento Netzwerkfehler. Retry in {wait_time:.1f}s... (Versuch {attempt}/{max_attempts})")
