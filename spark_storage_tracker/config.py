from pydantic import BaseModel


class TrackerConfig(BaseModel):
    # When False, removing an executor also forgets its peak, so a re-registered executor starts again from 0
    retain_peak_on_removal: bool = True


class ReaderThresholds(BaseModel):
    # For data over https, default to loading 1MB chunks of the file at a time
    http_chunk_size: int = 1024 * 1024
    # Largest s3 object we are willing to stream
    size: int = 20000000000
