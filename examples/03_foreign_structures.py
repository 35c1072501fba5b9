import numpy as np

from ndfield import ArrayStructure, BufferConfig, RealField, content_equals, nd_field

ctx = nd_field((2, 2), RealField(), config=BufferConfig(backend="numpy", dtype="float64"))

# A Fortran-ordered numpy array is not laid out with the context strides, so it
# is re-materialized on first use.
fortran = ArrayStructure(np.asfortranarray([[1.0, 2.0], [3.0, 4.0]]))
ones = ctx.one

total = ones + fortran
same = ctx.to_buffer(total)

assert same is total
assert content_equals(total - ones, fortran)
print(total.to_numpy())
