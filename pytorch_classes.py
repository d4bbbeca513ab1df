import torch
import torch.nn as nn


def get_device():
    if torch.backends.mps.is_available():
        return torch.device('mps')
    elif torch.cuda.is_available():
        return torch.device('cuda')
    return torch.device('cpu')


class TorchAliasSampler(nn.Module):
    """Draws batches of bucket indices from an AliasTable with torch ops
    """
    def __init__(self, table, device=None):
        """
        Input:
        ------
        table: A built AliasTable. Its probability and alias tables are
            copied into buffers, so .to(device) moves them along.
        device: Where to keep the buffers. Defaults to the cpu.
        """
        super(TorchAliasSampler, self).__init__()
        probability, alias = table.to_arrays()
        self.elements = table.elements
        # float32 so the buffers can live on mps
        self.register_buffer(
            "prob",
            torch.tensor(probability, dtype=torch.float32, device=device)
            )
        self.register_buffer(
            "alias",
            torch.tensor(alias, dtype=torch.long, device=device)
            )

    def forward(self, num_samples, generator=None):
        """
        Input:
        ------
        num_samples: How many bucket indices to draw
        generator: Optional torch.Generator on the same device as the buffers

        Returns:
        --------
        A long tensor of shape [num_samples]
        """
        if num_samples < 0:
            raise ValueError(
                f"num_samples must be >= 0, got {num_samples}."
                )
        n = self.prob.shape[0]
        kk = torch.randint(
            0, n, (num_samples,),
            generator=generator,
            device=self.prob.device
            )
        coin = torch.rand(
            num_samples,
            generator=generator,
            dtype=self.prob.dtype,
            device=self.prob.device
            )
        p = self.prob.index_select(0, kk)
        accept = (coin <= p) & (p > 0)
        return torch.where(accept, kk, self.alias.index_select(0, kk))

    def draw_elements(self, num_samples, generator=None):
        idx = self(num_samples, generator)
        return [self.elements[i] for i in idx.tolist()]
