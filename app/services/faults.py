# /classroom-ai-backend/app/services/faults.py

"""
The failure taxonomy shared by every service.

- `ConfigFault`: no/invalid classroom code, unknown record. Recovered locally
  (re-prompt, 404) and never forwarded to the AI collaborator.
- `AuthFault`: missing or rejected classroom credential.
- `ServiceFault` / `NoContentFault`: the upstream AI call failed or returned
  nothing usable.
- `StorageFault`: the Persistent Store could not read or write a collection.
  Fatal to the operation in flight; there is no retry.
"""


class ClassroomFault(Exception):
    """Base class for all faults raised by the classroom services."""


class ConfigFault(ClassroomFault):
    pass


class AuthFault(ClassroomFault):
    pass


class ServiceFault(ClassroomFault):
    pass


class NoContentFault(ServiceFault):
    pass


class StorageFault(ClassroomFault):
    pass


# Faults from the AI collaborator. These are converted into transcript
# entries by the chat service instead of propagating.
AI_FAULTS = (AuthFault, ServiceFault)
