from datetime import datetime
import uuid

def gen_id() -> str:
    return str(uuid.uuid4())

def now() -> datetime:
    # heure locale naïve, comme les dates saisies dans l'UI
    return datetime.now()
