from enum import Enum

class ConnectionStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"

class ConnectionState(str, Enum):
    """Connection state as seen by one of the two parties."""
    none = "none"
    pending_sent = "pending_sent"
    pending_received = "pending_received"
    accepted = "accepted"

class ConnectionAction(str, Enum):
    connect = "connect"
    accept = "accept"
    reject = "reject"
    remove = "remove"

class Visibility(str, Enum):
    public = "public"
    alumni = "alumni"
    private = "private"

class Role(str, Enum):
    student = "student"
    alumni = "alumni"

class JobType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"
    internship = "internship"
    contract = "contract"

class DirectorySort(str, Enum):
    name = "name"
    graduation_year = "graduation_year"
    created_at = "created_at"

class ErrorKind(str, Enum):
    unauthenticated = "unauthenticated"
    unauthorized = "unauthorized"
    validation = "validation"
    backend = "backend"
    conflict = "conflict"
    not_found = "not_found"
