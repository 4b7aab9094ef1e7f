from libs.result import Error

STORE_UNAVAILABLE = Error("STORE_UNAVAILABLE", "Session store is unavailable")
FORBIDDEN = Error("FORBIDDEN", "Only elevated roles can manage other accounts' sessions")
