"""Operator definitions: element-wise, transpose, matmul, concat, relu, clip and cast."""