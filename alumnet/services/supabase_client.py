from supabase import create_client, Client, ClientOptions

from alumnet.core.config import SUPABASE_URL, SUPABASE_ANON_KEY


def supabase_anon() -> Client:
    """
    Fresh anon-key client. One per request: the client holds the
    caller's session, so it must never be shared between users.
    """
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise RuntimeError("Missing SUPABASE_URL or SUPABASE_ANON_KEY")

    return create_client(
        SUPABASE_URL,
        SUPABASE_ANON_KEY,
        options=ClientOptions(
            auto_refresh_token=False,
            persist_session=False,
        ),
    )
