"""Exception types shared across services"""


class IntelliReadError(Exception):
    """Base class for all service errors"""


class PDFProcessingError(IntelliReadError):
    """The PDF could not be opened or parsed; ingestion cannot continue"""


class ImageDescriptionError(IntelliReadError):
    """The image description service failed for a single image"""


class LLMServiceError(IntelliReadError):
    """The question-answering provider failed to return an answer"""


class DocumentNotFoundError(IntelliReadError):
    """No document with the requested id exists in the store"""

    def __init__(self, document_id: str):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id
