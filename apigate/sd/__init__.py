"""Service discovery: subscribers, DNS SRV discovery, balancers and the subscriber register."""