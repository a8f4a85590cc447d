"""Protocol core: routing, dispatch, session transport and the HTTP application."""
