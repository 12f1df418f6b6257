import torch

# --- Configuration ---
DEVICE = torch.device("cuda" if torch.cuda.is_available() else "cpu")
"""The device (CPU or CUDA GPU) on which variables, scalars and solver state live."""

DEFAULT_DTYPE = torch.float64
"""The floating point precision used for every tensor created by torchfg."""

torch.set_default_dtype(DEFAULT_DTYPE)


def as_tensor(data) -> torch.Tensor:
    """
    Converts `data` (a tensor, a sequence of floats or a scalar) into a 1D tensor
    on `DEVICE` with `DEFAULT_DTYPE`.

    Returns:
        torch.Tensor: A 1D tensor. Scalars become tensors of shape (1,).
    """
    tensor = torch.as_tensor(data, dtype=DEFAULT_DTYPE, device=DEVICE)
    return tensor.reshape(-1)
