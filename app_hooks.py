from typing import Optional, Protocol


class AppHooks(Protocol):
    """
    Protocol for application hooks around a cache build.

    Implemented by the calling application to show progress and to request a stop
    between pipeline stages.
    """
    def report_step(self, info: str = "", target: Optional[int] = None, reset_counter: bool = False, plus_step: int = 1) -> None:
        """
        Report progress of the current stage.

        Args:
            info (str): Progress message.
            target (Optional[int]): Total steps expected for the stage.
            reset_counter (bool): Whether to restart the step counter.
            plus_step (int): Steps completed since the last report.
        """
        pass

    def stop_requested(self) -> bool:
        """
        Check if a stop has been requested by the user.

        Returns:
            bool: True if stop is requested, False otherwise.
        """
        return False
