from pydantic import BaseModel, Field


class FileSection(BaseModel):
    path: str
    content: str


class ParsedReply(BaseModel):
    """Structured view of a model reply.

    `files` keeps emission order. A path may appear more than once; applying
    the list in order lets the later body win.
    """

    explanation: str = ""
    files: list[FileSection] = Field(default_factory=list)
    trailing: str = ""

    @property
    def paths(self) -> list[str]:
        return [section.path for section in self.files]
