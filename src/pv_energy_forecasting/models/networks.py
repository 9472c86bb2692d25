# thirdpartylib
import torch
from torch import Tensor
from torch.nn import Module, Linear, Sigmoid


class AutoregressiveNetwork(Module):
    """
    Single hidden layer feed-forward network for lagged-input
    regression.

    Each input row holds the lagged (scaled) values of a series, plus
    any exogenous regressors at the target time step; the network maps
    it to the next (scaled) value through one sigmoid hidden layer and
    a linear output.

    Parameters
    ----------
    input_size : int
        Number of lagged inputs and regressors per row.
    hidden_size : int
        Number of hidden units.
    """
    def __init__(self, input_size: int, hidden_size: int) -> None:
        super().__init__()  # pyright: ignore[reportUnknownMemberType]
        self.hidden = Linear(input_size, hidden_size)
        self.activation = Sigmoid()
        # Linear output for regression
        self.output = Linear(hidden_size, 1)

    def forward(self, x: Tensor) -> Tensor:
        """
        Forward pass.

        Parameters
        ----------
        x : torch.Tensor
            Input tensor of shape ``(batch_size, input_size)``.

        Returns
        -------
        torch.Tensor
            Output tensor of shape ``(batch_size,)``.
        """
        return self.output(self.activation(self.hidden(x))).squeeze(-1)


def train_network(
        x: Tensor,
        y: Tensor,
        hidden_size: int,
        *,
        max_iter: int = 100,
        decay: float = 0.0,
        seed: int = 0,
    ) -> AutoregressiveNetwork:
    """
    Fit one network by full-batch L-BFGS on squared error with optional
    weight decay.

    Parameters
    ----------
    x : torch.Tensor
        Inputs of shape ``(n_samples, input_size)``.
    y : torch.Tensor
        Targets of shape ``(n_samples,)``.
    hidden_size : int
        Number of hidden units.
    max_iter : int, default 100
        Maximum L-BFGS iterations.
    decay : float, default 0.0
        L2 penalty on the weights.
    seed : int, default 0
        Seed of the random weight initialisation.
    """
    torch.manual_seed(seed)
    net = AutoregressiveNetwork(x.shape[1], hidden_size)
    optimizer = torch.optim.LBFGS(
        net.parameters(),
        max_iter=max_iter,
        line_search_fn="strong_wolfe",
    )

    def closure() -> Tensor:
        optimizer.zero_grad()
        loss = torch.sum((net(x) - y) ** 2)
        if decay > 0:
            loss = loss + decay * sum(
                torch.sum(p ** 2) for p in net.parameters()
            )
        loss.backward() # pyright: ignore[reportUnknownMemberType]
        return loss

    optimizer.step(closure) # pyright: ignore[reportUnknownMemberType]
    net.eval()
    return net
