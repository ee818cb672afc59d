"""
Reconstruction of a Helmholtz solution in the unit disk from boundary samples,
comparing propagative and evanescent plane wave approximation sets.
"""

import time

import jax.numpy as jnp
import numpy as np


def report(name, A, xi, b, U):
    residual = float(jnp.linalg.norm(A @ xi - b) / jnp.linalg.norm(b))
    stability = float(jnp.linalg.norm(xi) / np.linalg.norm(U))
    print(f"{name}: relative residual {residual:.3e}, ||xi||/||U|| {stability:.3e}")


if __name__ == "__main__":

    import jax
    import stable_epw

    jax.config.update("jax_default_device", jax.devices("cpu")[0])

    # Target u = 1/2 b_0 + i b_P with wavenumber k
    k = 5.0
    P = 25
    U = np.zeros(2 * P + 1, dtype=complex)
    U[P] = 0.5  # constant mode p = 0
    U[2 * P] = 1j  # mode p = P
    u = stable_epw.solution_surrogate(U, k=k)

    # Boundary samples
    N = 100
    S = stable_epw.number_of_boundary_sampling_nodes(N, eta=2, P=P)
    r, theta = stable_epw.boundary_sampling_nodes(S)
    b = stable_epw.samples_from_nodes(u, r, theta)

    # Propagative plane waves: no accuracy, huge coefficients
    phis = stable_epw.propagative_approximation_set(N, k=k)
    A = stable_epw.samples_from_nodes(phis, r, theta)
    pinv = stable_epw.regularized_pseudo_inverse(A, eps=1e-14)
    print(f"PPW condition number {stable_epw.condition_number(pinv):.3e}")
    report("PPW", A, stable_epw.solve(pinv, b), b, U)

    # Evanescent plane waves sampled from the truncated kernel
    start = time.time()
    phis = stable_epw.evanescent_approximation_set(N, P, "sobol", k=k, verbose=True)
    print("sampling took {:3.3f} sec".format(time.time() - start))
    A = stable_epw.samples_from_nodes(phis, r, theta)
    pinv = stable_epw.regularized_pseudo_inverse(A, eps=1e-14)
    report("EPW", A, stable_epw.solve(pinv, b), b, U)

    # Doubling the number of evanescent waves reaches machine precision
    result = stable_epw.dirichlet_sampling(k, U, 2 * N, strategy="sobol")
    print(
        f"EPW (N={2 * N}): relative residual {result.residual:.3e}, "
        f"||xi||/||U|| {result.stability:.3e}, "
        f"error at (1, pi/2) {abs(complex(result.error(1.0, np.pi / 2))):.3e}"
    )
