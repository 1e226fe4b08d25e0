class PartyError(Exception):
    """Caller-input error surfaced to the originating connection."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class AlreadyInParty(PartyError):
    def __init__(self):
        super().__init__('Already in a party.')


class PartyNotFound(PartyError):
    def __init__(self, code: str):
        super().__init__(f'Party "{code}" not found.')
        self.code = code


class PartyFull(PartyError):
    def __init__(self, max_members: int):
        super().__init__(f'Party is full (max {max_members}).')
        self.max_members = max_members
