import os
import redis
from rq import Queue

REDIS_URL = os.getenv("REDIS_URL")
if REDIS_URL is None:
    raise ValueError("REDIS_URL environment variable not set")

# Redis connection & RQ queue for outgoing notification mails
# RQ stores pickled job data, so responses stay as bytes
redis_conn_global = redis.from_url(REDIS_URL)
notification_queue = Queue("notifications", connection=redis_conn_global)
