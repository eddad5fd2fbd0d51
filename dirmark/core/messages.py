from textual.message import Message


class NavigateIntoRequest(Message):
    def __init__(self, index: int, generation: int) -> None:
        self.index = index
        self.generation = generation
        super().__init__()


class NavigateParentRequest(Message):
    pass


class ToggleMarkRequest(Message):
    def __init__(self, index: int, generation: int) -> None:
        self.index = index
        self.generation = generation
        super().__init__()


class PreviewRequest(Message):
    def __init__(self, index: int, generation: int, *, marked_view: bool) -> None:
        self.index = index
        self.generation = generation
        self.marked_view = marked_view
        super().__init__()
