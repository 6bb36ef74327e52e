"""
Core of devenvd.

One environment description is driven through lifecycle operations against
a container runtime and then kept under observation.

Base lifecycle:
    - validate description, resolve services start order
      -> cyclic or dangling dependencies fail before any runtime call
    - create
      -> pull images, create networks, create volumes
      -> run services in start order
      -> wait till all services healthy
    - health and metrics loops poll runtime while environment is running
    - stop / destroy walk services in reversed start order,
      single service failure doesn't break the walk

All runtime calls are atomic CLI commands:
> docker pull %image%
> docker network create %network%
> docker volume create %volume%
> docker run -d --name %project%_%service% ...
> docker inspect %container%
> docker stats --no-stream %container%

Used runtime commands described in runtime_interface
"""
