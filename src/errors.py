class FSSError(Exception):
    """
    Base class for errors raised by the finite-size scaling search.

    Attributes:
        grid_index (int or tuple): Position in the parameter grid where the error occurred.
                                   An int for the one-parameter search, (row, col) = (v2, v1) index for the two-parameter search.
        dataset_index (int): Position of the offending dataset in the collection.
    """

    def __init__(self, message, grid_index=None, dataset_index=None):
        super().__init__(message)
        self.message = message
        self.grid_index = grid_index
        self.dataset_index = dataset_index

    def __str__(self):
        context = []
        if self.grid_index is not None:
            context.append(f"grid index {self.grid_index}")
        if self.dataset_index is not None:
            context.append(f"dataset index {self.dataset_index}")
        if context:
            return f"{self.message} ({', '.join(context)})"
        return self.message


class ShapeMismatchError(FSSError, ValueError):
    pass


class DuplicateSizeError(FSSError, ValueError):
    pass


class InvalidRangeError(FSSError, ValueError):
    pass


class DegenerateFitError(FSSError, ArithmeticError):
    pass


class DivisionByZeroError(FSSError, ZeroDivisionError):
    pass
